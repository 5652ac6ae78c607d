"""Launch the RepoScribe Streamlit app and open the browser."""

import threading
import time
import webbrowser
from pathlib import Path

import requests

PORT = 8501
URL = f"http://localhost:{PORT}"


def _wait_and_open_browser() -> None:
    """Wait for the Streamlit server to become ready, then open the browser."""
    for _ in range(30):
        try:
            if requests.get(URL, timeout=2).status_code == 200:
                webbrowser.open(URL)
                return
        except requests.RequestException:
            pass
        time.sleep(1)


def main() -> None:
    from streamlit.web import bootstrap

    app_path = str(Path(__file__).resolve().parent / "src" / "RepoScribe" / "app.py")
    threading.Thread(target=_wait_and_open_browser, daemon=True).start()

    bootstrap.run(
        app_path,
        is_hello=False,
        args=[],
        flag_options={
            "server.headless": True,
            "server.port": PORT,
            "browser.gatherUsageStats": False,
        },
    )


if __name__ == "__main__":
    main()
