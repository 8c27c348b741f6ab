"""Checkout load test journeys.

CartCheckoutJourney: create cart -> add items -> view -> checkout -> track.
BuyNowJourney: direct checkout of one product -> look the order up by id.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    cart_data,
    cart_item_data,
    checkout_data,
    customer_id,
    direct_item_data,
    session_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


class CartCheckoutJourney(SequentialTaskSet):
    def on_start(self):
        self.state = ShopperState(
            customer_id=customer_id(),
            session_id=session_id(),
            loyalty_balance=random.choice([0, 0, 50, 250]),
        )

    @task
    def create_cart(self):
        with self.client.post(
            "/carts",
            json=cart_data(self.state.session_id, self.state.customer_id),
            catch_response=True,
            name="POST /carts",
        ) as resp:
            if resp.status_code == 201:
                self.state.cart_id = resp.json()["cart_id"]
            else:
                resp.failure(f"Create cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_items(self):
        for _ in range(random.randint(1, 4)):
            with self.client.post(
                f"/carts/{self.state.cart_id}/items",
                json=cart_item_data(),
                catch_response=True,
                name="POST /carts/{id}/items",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Add item failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get(f"/carts/{self.state.cart_id}", name="GET /carts/{id}")

    @task
    def checkout(self):
        payload = checkout_data(cart_id=self.state.cart_id, points=self.state.loyalty_balance // 2)
        self.state.correlation_key = payload["correlation_key"]
        with self.client.post(
            "/checkout",
            json=payload,
            headers=self.state.headers,
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["order_id"]
                self.state.order_number = body["order_number"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def track(self):
        self.client.get(f"/orders/tracking/{self.state.order_number}", name="GET /orders/tracking/{number}")
        self.client.get(f"/customers/{self.state.customer_id}/orders", name="GET /customers/{id}/orders")

    @task
    def done(self):
        self.interrupt()


class BuyNowJourney(SequentialTaskSet):
    def on_start(self):
        self.state = ShopperState(customer_id=customer_id(), session_id=session_id())

    @task
    def buy_now(self):
        with self.client.post(
            "/checkout",
            json=checkout_data(item=direct_item_data()),
            headers=self.state.headers,
            catch_response=True,
            name="POST /checkout (direct)",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Buy now failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_order(self):
        self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}")

    @task
    def done(self):
        self.interrupt()


class CartCheckoutUser(HttpUser):
    tasks = [CartCheckoutJourney]
    wait_time = between(1, 3)


class BuyNowUser(HttpUser):
    tasks = [BuyNowJourney]
    wait_time = between(0.5, 2)
