#!/usr/bin/env python3
"""List all port forwarding rules from a Livebox router."""

import json

from dotenv import load_dotenv

from mcp_livebox import ClientConfig, LiveboxClient, LiveboxError

# Load environment variables from .env file
load_dotenv()


def main():
    config = ClientConfig.from_env()
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        print("Create a .env file with:")
        print("  LIVEBOX_HOST=https://192.168.1.1")
        print("  LIVEBOX_PASSWORD=your_password")
        return

    print(f"Connecting to router at {config.host}...")

    try:
        with LiveboxClient(config.host, config.password) as client:
            rules = client.list_port_forwardings()
    except LiveboxError as e:
        print(f"Failed to list rules: {e}")
        return

    print("\nPort Forwarding Rules:")
    print("-" * 80)

    if not rules:
        print("No port forwarding rules found")
    else:
        print(f"{'Name':<20} {'Destination':<16} {'Ext Port':<12} {'Int Port':<10} {'Protocol':<10} {'Enabled':<7}")
        print("-" * 80)

        for rule in sorted(rules, key=lambda r: r.name):
            ext = str(rule.external_port)
            if rule.port_range > 1:
                ext = f"{rule.external_port}-{rule.external_port + rule.port_range}"
            print(f"{rule.name:<20} "
                  f"{rule.destination:<16} "
                  f"{ext:<12} "
                  f"{rule.internal_port:<10} "
                  f"{rule.protocol.value:<10} "
                  f"{'yes' if rule.enabled else 'no':<7}")

    # Also print as JSON for debugging
    print("\n\nRaw JSON output:")
    print(json.dumps([rule.to_dict() for rule in rules], indent=2))


if __name__ == "__main__":
    main()
