import json

from middleman.client import DEFAULT_GATEWAY_URL, GatewayClient
from middleman.shared import read_gateway_config


def send_request(client: GatewayClient, route: str, payload: dict):
    reply = client.send(route, payload)
    marker = "✔" if reply.success else "!"
    print(f"[{marker}] {reply.message}")
    if reply.data is not None:
        print(json.dumps(reply.data, indent=2))


if __name__ == "__main__":
    import argparse

    from middleman.shared import load_config

    config = load_config()

    def parse_args():
        parser = argparse.ArgumentParser(
            description="Seal a JSON document and send it through a running middleman"
        )
        parser.add_argument("route", type=str, help="Route without prefix, e.g. /create-account")
        parser.add_argument("payload", type=str, help="JSON document to send")
        parser.add_argument("--url", type=str, default=DEFAULT_GATEWAY_URL)
        parser.add_argument(
            "--gateway-config",
            type=str,
            default=config.paths.gateway_config,
            help="JSON config holding the shared key",
        )
        return parser.parse_args()

    args = parse_args()
    gateway_config = read_gateway_config(args.gateway_config)

    with GatewayClient(gateway_config.key, base_url=args.url) as client:
        send_request(client, args.route, json.loads(args.payload))
