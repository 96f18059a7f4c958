"""Pytest configuration and fixtures for validation package tests."""

import asyncio

import pytest

from formknobs_validation import (
    FormSchema,
    FormValidationOrchestrator,
    StepContext,
    date_range,
    email,
    interests,
    phone,
    required,
)


@pytest.fixture
def trip_schema():
    """Trip request schema with a date-range rule on endDate."""
    return (
        FormSchema("trip_request")
        .field("name", [required("Name")], label="Name")
        .field("email", [required("Email"), email()], label="Email")
        .field("phone", [phone()], label="Phone")
        .field("destination", [], label="Destination")
        .field("startDate", [required("Start date")], label="Start date")
        .field("endDate", [required("End date")], label="End date")
        .field("interests", [interests(1, 5)], label="Interests")
        .cross_field(date_range())
    )


@pytest.fixture
def trip_steps():
    """Two-step partition of the trip request form."""
    return StepContext(
        step_fields={
            0: ["name", "email", "phone"],
            1: ["destination", "startDate", "endDate", "interests"],
        },
        required_fields={1: ["destination"]},
        optional_fields={0: ["phone"]},
    )


@pytest.fixture
def valid_trip():
    """Trip request data passing every check."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+1 (555) 123-4567",
        "destination": "Lisbon",
        "startDate": "2024-06-01",
        "endDate": "2024-06-10",
        "interests": ["food", "museums"],
    }


@pytest.fixture
def orchestrator(trip_schema, trip_steps):
    """Orchestrator over the trip request form."""
    return FormValidationOrchestrator(trip_schema, trip_steps)


class Gate:
    """Async validator whose completion is controlled by the test."""

    def __init__(self, result):
        self.result = result
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = []

    async def __call__(self, value):
        self.calls.append(value)
        self.started.set()
        await self.release.wait()
        return self.result


@pytest.fixture
def gate():
    """Factory for test-controlled async validators."""
    return Gate


class FakeElement:
    """Records focus and scroll calls."""

    def __init__(self, selector):
        self.selector = selector
        self.calls = []

    def focus(self):
        self.calls.append(("focus",))

    def scroll_into_view(self, options):
        self.calls.append(("scroll", dict(options)))


class FakeLocator:
    """Element locator over a fixed set of selectors."""

    def __init__(self, selectors):
        self.elements = {s: FakeElement(s) for s in selectors}
        self.queries = []

    def find(self, selector):
        self.queries.append(selector)
        return self.elements.get(selector)


@pytest.fixture
def locator_factory():
    """Factory for fake element locators."""
    return FakeLocator
