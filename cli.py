"""Small CLI for interacting with the verification server.

Usage examples:
    python cli.py init --preset 512 --trustees 3 --threshold 2
    python cli.py params
    python cli.py verify selection --file selection.json
    python cli.py check-tally --value 16 --tally 2
"""

import argparse
import json

import requests


BASE = "http://127.0.0.1:5000"

_VERIFY_KINDS = ("selection", "contest", "decryption", "commitments")


def init(preset: str, trustees=None, threshold=None):
    body = {"preset": preset}
    if trustees is not None:
        body["trustees"] = trustees
    if threshold is not None:
        body["threshold"] = threshold
    r = requests.post(f"{BASE}/init", json=body, timeout=5)
    print(r.json())


def params():
    r = requests.get(f"{BASE}/params", timeout=2)
    print(r.json())


def verify(kind: str, path: str):
    with open(path, "r") as f:
        body = json.load(f)
    r = requests.post(f"{BASE}/verify/{kind}", json=body, timeout=10)
    print(r.json())


def check_tally(value: int, tally: int):
    r = requests.post(f"{BASE}/tally/check", json={"value": value, "tally": tally}, timeout=2)
    print(r.json())


def main():
    p = argparse.ArgumentParser()
    sub = p.add_subparsers(dest="cmd")
    i = sub.add_parser("init")
    i.add_argument("--preset", default="512", choices=["toy", "512", "default"])
    i.add_argument("--trustees", type=int)
    i.add_argument("--threshold", type=int)
    sub.add_parser("params")
    v = sub.add_parser("verify")
    v.add_argument("kind", choices=_VERIFY_KINDS)
    v.add_argument("--file", required=True)
    t = sub.add_parser("check-tally")
    t.add_argument("--value", type=int, required=True)
    t.add_argument("--tally", type=int, required=True)
    args = p.parse_args()
    if args.cmd == "init":
        init(args.preset, args.trustees, args.threshold)
    elif args.cmd == "params":
        params()
    elif args.cmd == "verify":
        verify(args.kind, args.file)
    elif args.cmd == "check-tally":
        check_tally(args.value, args.tally)
    else:
        p.print_help()


if __name__ == "__main__":
    main()
