"""Serve the auction API with uvicorn.
Usage: python scripts/run_server.py [--host HOST] [--port PORT]
"""
import argparse
import os
import pathlib
import sys
# Ensure `backend/` is on sys.path so `auction` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
import uvicorn


def main(host: str, port: int):
    from auction.main import app
    uvicorn.run(app, host=host, port=port)


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--host', default=os.environ.get('HOST', '0.0.0.0'))
    parser.add_argument('--port', type=int, default=int(os.environ.get('PORT', '3333')))
    args = parser.parse_args()
    main(args.host, args.port)
