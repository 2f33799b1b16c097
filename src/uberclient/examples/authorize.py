"""
Authorize with Uber through the browser and print the user's profile.

You'll need UBER_SERVER_TOKEN, UBER_CLIENT_ID, UBER_CLIENT_SECRET and
UBER_REDIRECT_URI set (a .env file works). The redirect URI registered with
Uber must point at this machine, e.g. http://localhost:7635/callback.

Uber API: https://developer.uber.com/v1/endpoints
"""

import asyncio
import logging
import os

from dotenv import load_dotenv

from uberclient.client.api import UberClient
from uberclient.config import ClientConfig
from uberclient.errors import UberError


async def main():
    client = UberClient(os.getenv("UBER_SERVER_TOKEN"), config=ClientConfig.from_env())
    try:
        products = await client.get_products(37.7759792, -122.41823)
        for product in products:
            logging.info(f"Product: {product.display_name} ({product.capacity} seats)")

        await client.auto_oauth(
            os.environ["UBER_CLIENT_ID"],
            os.environ["UBER_CLIENT_SECRET"],
            os.environ["UBER_REDIRECT_URI"],
            "profile",
            "history",
        )

        profile = await client.get_user_profile()
        print(f"Authorized as {profile.first_name} {profile.last_name}")
    except UberError as e:
        logging.error(f"Uber API error: {e}")
    finally:
        await client.close()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
