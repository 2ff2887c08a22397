"""
ClientFactory Examples

Demonstrates presets, overrides, the client cache and preset files.

Environment:
    API_CLIENT_BASE_URL=https://api.example.com
    API_CLIENT_AUTH_TOKEN=secret-token
"""

import asyncio

from api_client import ClientFactory, ClientSettings


async def main():
    factory = ClientFactory(ClientSettings(base_url="https://jsonplaceholder.typicode.com"))

    print("\n=== Presets ===")
    for preset in factory.list_configs():
        config = preset.config
        print(f"{preset.name:10} timeout={config.timeout_ms}ms retries={config.max_retries}")

    print("\n=== Cache ===")
    client = factory.create_client()
    print(f"Same instance: {client is factory.create_client('default')}")

    tenant = factory.create_client("default", {"headers": {"X-Tenant": "acme"}, "timeout_ms": 5000})
    print(f"Override client: {tenant!r}")

    print("\n=== Update preset ===")
    factory.update_client_config("default", {"max_retries": 1})
    print(f"New client after update: {factory.create_client() is not client}")

    response = await tenant.get("/todos/1")
    print(f"Request id: {response.config.headers['X-Request-ID']}")
    print(f"Data: {response.data}")

    await client.close()
    await tenant.close()


if __name__ == "__main__":
    asyncio.run(main())
