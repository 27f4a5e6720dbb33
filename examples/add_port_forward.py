#!/usr/bin/env python3
"""Add or replace a single port forwarding rule on a Livebox router.

Usage:
    python add_port_forward.py wireguard 51820 192.168.1.200 51820 udp
    python add_port_forward.py ssh 2222 192.168.1.50 22 tcp
    python add_port_forward.py voip 10000-10100 192.168.1.75 10000 udp
"""

import sys

from dotenv import load_dotenv

from mcp_livebox import (
    ClientConfig,
    DecodeError,
    LiveboxClient,
    LiveboxError,
    PortForwardingRule,
    parse_port_range,
)

load_dotenv()


def main():
    # Parse command line arguments
    if len(sys.argv) < 5:
        print("Usage: python add_port_forward.py <name> <external_port> <destination> <internal_port> [protocol]")
        print()
        print("Arguments:")
        print("  name          - Unique name for the rule")
        print("  external_port - External port number or range (e.g., 80 or 10000-10100)")
        print("  destination   - Internal device IP address")
        print("  internal_port - Internal port number")
        print("  protocol      - tcp, udp, or tcp/udp (default: tcp/udp)")
        return

    name = sys.argv[1]
    destination = sys.argv[3]
    try:
        external_port, port_range = parse_port_range(sys.argv[2])
        internal_port = int(sys.argv[4])
    except (DecodeError, ValueError) as e:
        print(f"Error: invalid port: {e}")
        print("Usage: python add_port_forward.py <name> <external_port> <destination> <internal_port> [protocol]")
        return
    protocol = sys.argv[5] if len(sys.argv) > 5 else "tcp/udp"

    config = ClientConfig.from_env()
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        return

    rule = PortForwardingRule(
        name=name,
        protocol=protocol,
        external_port=external_port,
        internal_port=internal_port,
        port_range=port_range,
        destination=destination,
    )

    print(f"Connecting to router at {config.host}...")

    try:
        with LiveboxClient(config.host, config.password) as client:
            client.upsert_port_forwarding(rule)

            # Verify the rule was added
            saved = client.get_port_forwarding(name)
    except LiveboxError as e:
        print(f"\n✗ Failed to add port forwarding rule: {e}")
        return

    print("\n✓ Port forwarding rule added successfully!")
    print(f"  {saved.to_dict()}")


if __name__ == "__main__":
    main()
