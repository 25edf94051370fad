"""Project root entry point for launching the web host."""

from __future__ import annotations

import os


def main():
    from comment_translate.web import create_app

    app = create_app()
    port = int(os.environ.get("COMMENT_TRANSLATE_PORT", "5500"))
    app.run(host="127.0.0.1", port=port, debug=False)


if __name__ == "__main__":
    main()
