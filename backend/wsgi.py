# backend/wsgi.py
"""
Entry point for `flask --app wsgi ...` and for running the local server.

    python wsgi.py          # serve on 127.0.0.1:5000
    python wsgi.py --dev    # same, with the Flask debugger and reloader
"""
import argparse

from stockpos import create_app

app = create_app()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the StockPOS local server")
    parser.add_argument("--dev", action="store_true", help="Enable debug mode")
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args(argv)

    app.run(host="127.0.0.1", port=args.port, debug=args.dev)


if __name__ == "__main__":
    main()
