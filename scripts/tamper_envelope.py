import base64
import json

import httpx

from middleman.core.envelope import open_envelope, seal
from middleman.shared import read_gateway_config


def flip_byte(envelope: str, index: int) -> str:
    raw = bytearray(base64.b64decode(envelope))
    raw[index % len(raw)] ^= 0x01
    return base64.b64encode(bytes(raw)).decode()


def attack_envelope(url: str, route: str, key: bytes, index: int):
    envelope = seal(json.dumps({"company_name": "Acme", "quota_gb": 10}).encode(), key)
    tampered = flip_byte(envelope, index)

    response = httpx.post(f"{url}/api{route}", json={"data": tampered})
    print(f"[✔] Sent envelope with byte {index} flipped, HTTP {response.status_code}")

    reply = json.loads(open_envelope(response.json()["data"], key))
    if reply["success"]:
        print("[!] Gateway accepted a tampered envelope")
    else:
        print(f"[✔] Gateway rejected it: {reply['message']}")


if __name__ == "__main__":
    import argparse

    from middleman.shared import load_config

    config = load_config()

    def parse_args():
        parser = argparse.ArgumentParser(description="Simulate envelope tampering")
        parser.add_argument("--route", type=str, default="/health")
        parser.add_argument("--index", type=int, default=20, help="Byte to flip")
        parser.add_argument("--url", type=str, default="http://localhost:8882")
        parser.add_argument(
            "--gateway-config", type=str, default=config.paths.gateway_config
        )
        return parser.parse_args()

    args = parse_args()
    gateway_config = read_gateway_config(args.gateway_config)

    attack_envelope(args.url, args.route, gateway_config.key, args.index)
