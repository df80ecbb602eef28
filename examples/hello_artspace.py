import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import artspace
from artspace.gallery import Camera, GalleryListener, GalleryView, StrokeSubscription


class PrintListener(GalleryListener):
    def artifact_selected(self, artifact_id: int) -> None:
        print(f"selected artifact {artifact_id}")

    def notify(self, message: str) -> None:
        print(f"! {message}")


def main() -> None:
    artspace.configure_logging("info")
    srv = artspace.run(port=57800, open_browser=False)
    client = srv.client() if isinstance(srv, artspace.ArtSpaceServer) else srv

    user = client.create_user(f"painter{int(time.time())}@example.com", f"painter{int(time.time())}", "Painter")
    portfolio = client.create_portfolio(user["id"], "Studio", is_public=True)
    for i, kind in enumerate(["image", "document", "data_visualization", "ml_notebook", "web_application"]):
        client.create_artifact(
            portfolio["id"],
            f"Piece {i + 1}",
            kind,
            f"https://example.com/piece/{i + 1}",
            position=(3.0 * (i - 2), 1.5, -4.0 - abs(i - 2)),
            ar_enabled=kind == "image",
        )
    session = client.create_session(portfolio["id"], user["id"], "Critique")
    client.join_session(session["id"], user["id"])

    view = GalleryView(
        listener=PrintListener(),
        save_stroke=client.stroke_saver(user["id"]),
        save_placement=client.placement_saver(),
        portfolio_title=portfolio["title"],
    )
    view.resize(1024, 640)
    view.set_artifacts(client.get_gallery_artifacts(portfolio["id"]))
    poller = ThreadPoolExecutor(max_workers=1, thread_name_prefix="artspace-poll")
    view.set_collaboration(session["id"], StrokeSubscription(client.stroke_fetcher(session["id"]), poller))

    # Sketch a stroke, walk forward a bit, then click the artifact in the middle.
    view.set_drawing_mode(True, color="#ffeaa7", width=4)
    view.pointer_down(100, 500)
    for x in range(110, 300, 10):
        view.pointer_move(x, 500 - (x - 100) // 2)
    view.pointer_up()
    view.set_drawing_mode(False)

    view.key_down("w")
    for _ in range(20):
        view.tick()
    view.key_up("w")

    view.snapshot_png()
    hit = view.pointer_down(512, 320)
    for _ in range(120):
        view.tick()

    out = Path("gallery.png")
    out.write_bytes(view.snapshot_png())
    print(f"picked {hit}; wrote {out.resolve()}")
    print(f"server snapshot: {client.base_url}/api/portfolios/{portfolio['id']}/gallery.png")

    server_png = client.render_gallery(portfolio["id"], camera=Camera(z=14.0), session_id=session["id"])
    Path("gallery_server.png").write_bytes(server_png)
    view.close()
    poller.shutdown(wait=False)


if __name__ == "__main__":
    main()
