from __future__ import annotations

from dataclasses import dataclass

from .models import ArtifactType


@dataclass(frozen=True)
class ArtifactStyle:
    icon: str
    label: str
    color: tuple[int, int, int]


ARTIFACT_STYLES: dict[ArtifactType, ArtifactStyle] = {
    ArtifactType.DATA_VISUALIZATION: ArtifactStyle(icon="\U0001F4CA", label="Data Visualization", color=(69, 183, 209)),
    ArtifactType.ML_NOTEBOOK: ArtifactStyle(icon="\U0001F916", label="ML Notebook", color=(150, 206, 180)),
    ArtifactType.WEB_APPLICATION: ArtifactStyle(icon="\U0001F310", label="Web Application", color=(78, 205, 196)),
    ArtifactType.IMAGE: ArtifactStyle(icon="\U0001F5BC", label="Image", color=(255, 107, 107)),
    ArtifactType.DOCUMENT: ArtifactStyle(icon="\U0001F4C4", label="Document", color=(255, 234, 167)),
}

_missing = set(ArtifactType) - set(ARTIFACT_STYLES)
if _missing:
    raise RuntimeError(f"ARTIFACT_STYLES is missing entries for: {sorted(m.value for m in _missing)}")


def style_for(artifact_type: ArtifactType | str) -> ArtifactStyle:
    return ARTIFACT_STYLES[ArtifactType.from_any(artifact_type)]
