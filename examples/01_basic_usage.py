"""
Basic API Client Usage Examples

Demonstrates GET / POST requests, interceptors, retry and error handling.
"""

import asyncio

from api_client import APIClient, ClientConfig, NotFoundError, RequestConfig


async def basic_requests():
    """Simple GET and POST requests."""
    print("\n=== Basic Requests ===")

    async with APIClient("https://jsonplaceholder.typicode.com") as client:
        response = await client.get("/posts/1")
        print(f"Status: {response.status} {response.status_text}")
        print(f"Data: {response.data}")

        response = await client.post("/posts", data={"title": "My Post", "userId": 1})
        print(f"Created: {response.data}")


async def with_interceptors():
    """Request interceptor adds a header to every attempt."""
    print("\n=== Interceptors ===")

    config = ClientConfig(
        base_url="https://jsonplaceholder.typicode.com",
        interceptors={"request": [lambda c: c.with_headers({"X-Client": "example"})]},
    )
    async with APIClient(config=config) as client:
        response = await client.request(RequestConfig("GET", "/users", params={"id": 1}))
        print(f"Sent headers: {dict(response.config.headers)}")


async def error_handling():
    """4xx errors are raised immediately, without retry."""
    print("\n=== Error Handling ===")

    async with APIClient("https://jsonplaceholder.typicode.com", max_retries=2) as client:
        try:
            await client.get("/posts/999999")
        except NotFoundError as e:
            print(f"Not found: status={e.status}, retryable={e.is_retryable}")


async def main():
    await basic_requests()
    await with_interceptors()
    await error_handling()


if __name__ == "__main__":
    asyncio.run(main())
