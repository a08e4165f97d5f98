"""Shared fixtures.

Nothing here touches the network: HTTP sessions are scripted fakes and
Google credentials are never loaded.
"""

from __future__ import annotations

import pytest

from Livestock_RAG_Backend.core.config import RagConfig
from fakes import StaticTokenProvider


@pytest.fixture
def rag_config() -> RagConfig:
    return RagConfig(project_id="demo-project", location="europe-west3", corpus_id="6917529027641081856")


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    return StaticTokenProvider()


@pytest.fixture
def cattle_payload() -> dict:
    return {
        "contexts": {
            "contexts": [
                {
                    "sourceUri": "https://example.org/cattle-health.pdf",
                    "sourceDisplayName": "Cattle Health Handbook",
                    "text": (
                        "Foot and mouth disease is a highly contagious viral infection of cattle. "
                        "Affected animals develop blisters in the mouth and on the feet. "
                        "Milk yield drops sharply in infected dairy herds."
                    ),
                },
                {
                    "sourceUri": "gs://vet-corpus/dairy-herd.pdf",
                    "sourceDisplayName": "Dairy Herd Diseases",
                    "text": (
                        "Mastitis is an inflammation of the udder usually caused by bacteria. "
                        "Brucellosis causes abortion in late pregnancy and can infect people. "
                        "Anthrax kills cattle suddenly and carcasses must never be opened."
                    ),
                },
            ]
        },
        "scores": [0.8, 0.4],
    }
