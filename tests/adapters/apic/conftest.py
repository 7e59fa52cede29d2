"""Shared fixtures for APIC adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from apicsync.adapters.apic import ApicClient, ApicTransport
from tests.helpers.apic_http import RecordingHandler, apic_config

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def apic_client(handler: RecordingHandler) -> Iterator[ApicClient]:
    with ApicClient(config=apic_config(handler)) as client:
        yield client


@pytest.fixture
def apic_transport(handler: RecordingHandler) -> Iterator[ApicTransport]:
    transport = ApicTransport(config=apic_config(handler))
    yield transport
    transport.close()
