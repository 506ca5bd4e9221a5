"""Quickstart example: a declarative NATS client publishing order events.

Demonstrates:
- Declaring a client interface with @nats_client and @subject
- Building it against the default serdes registry
- Fire-and-forget publishing and request/reply

Requires a NATS server on localhost:4222 (e.g. `docker run -p 4222:4222 nats`).
"""

import asyncio
from typing import Annotated

import msgspec

from omninats import (
    ClientBuilder,
    ConnectionManager,
    Settings,
    Subject,
    default_registry,
    nats_client,
    subject,
)


class Order(msgspec.Struct):
    sku: str
    quantity: int


@nats_client
class OrderClient:
    @subject("orders.created")
    async def created(self, order: Order) -> None:
        ...

    @subject("orders.price")
    async def price(self, sku: str) -> float:
        ...

    async def send(self, target: Annotated[str, Subject], order: Order) -> None:
        ...


async def main():
    print("=== Quickstart Example ===")
    print()

    settings = Settings.from_env()
    registry = default_registry()

    async with ConnectionManager(settings) as connections:
        client = ClientBuilder(registry, connections).build(OrderClient)

        # Answer price requests so the request/reply call has a responder
        nc = connections.get().nc

        async def price_responder(msg):
            await msg.respond(registry.encode(19.99))

        await nc.subscribe("orders.price", cb=price_responder)

        print("Publishing order events...")
        await client.created(Order(sku="A-1", quantity=2))
        await client.send("orders.eu.created", Order(sku="B-7", quantity=1))

        print("Requesting a price...")
        price = await client.price("A-1")
        print(f"  Price for A-1: {price}")

    print()
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
