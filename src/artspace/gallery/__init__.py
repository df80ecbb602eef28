from __future__ import annotations

from .annotation import (
    STROKE_PALETTE,
    AnnotationLayer,
    Stroke,
    StrokeBuilder,
    StrokeSubscription,
    encode_stroke_points,
    parse_stroke_points,
    strokes_from_records,
)
from .camera import OVERVIEW_POSE, CameraController, InputState, focus_pose
from .picking import ClickRegion, DragState, pick
from .projection import Camera, ProjectedPoint, ProjectedPoints, Viewport, project, project_points
from .scene import RenderResult, SceneRenderer, depth_sort, load_thumbnail_file
from .surface import PillowSurface, Surface
from .view import ArtifactPlacement, GalleryListener, GalleryView, StrokeSubmission

__all__ = [
    "STROKE_PALETTE",
    "AnnotationLayer",
    "Stroke",
    "StrokeBuilder",
    "StrokeSubscription",
    "encode_stroke_points",
    "parse_stroke_points",
    "strokes_from_records",
    "OVERVIEW_POSE",
    "CameraController",
    "InputState",
    "focus_pose",
    "ClickRegion",
    "DragState",
    "pick",
    "Camera",
    "ProjectedPoint",
    "ProjectedPoints",
    "Viewport",
    "project",
    "project_points",
    "RenderResult",
    "SceneRenderer",
    "depth_sort",
    "load_thumbnail_file",
    "PillowSurface",
    "Surface",
    "ArtifactPlacement",
    "GalleryListener",
    "GalleryView",
    "StrokeSubmission",
]
