"""Shared fixtures for RRLabel tests."""

import pytest

from rrlabel.core.models import Image, Layout, LayoutSize
from rrlabel.core.manifest_store import ManifestStore


@pytest.fixture
def raw_document():
    """A complete version 2 manifest as decoded JSON."""
    return {
        "version": 2,
        "layout": {
            "name": "Harbour Yard",
            "scale": "HO",
            "size": {"width": 1435, "height": 800},
            "description": "Module 3",
            "contact": "club@example.org",
            "gauge_mm": 1435.0,
            "scale_ratio": None,
        },
        "camera": {"resolution": {"width": 640, "height": 480}, "model": None},
        "calibration": {
            "rect-0": {"x": 100, "y": 100},
            "rect-1": {"x": 100, "y": 400},
            "rect-2": {"x": 500, "y": 100},
            "rect-3": {"x": 500, "y": 400},
        },
        "images": [
            {
                "filename": "yard.jpg",
                "labels": {
                    "a1": {"x": 120, "y": 130, "type": "train"},
                    "a2": {"x": 300, "y": 250, "type": "track"},
                },
            },
            {"filename": "yard-2.jpg", "labels": {}},
        ],
    }


@pytest.fixture
def document(raw_document):
    return ManifestStore.from_document(raw_document)


@pytest.fixture
def store(document):
    return ManifestStore(document)


@pytest.fixture
def empty_store():
    store = ManifestStore()
    store.set_image_dimensions(640, 480)
    store.set_images([Image("yard.jpg")])
    store.set_layout(Layout(name="Test", scale="HO", size=LayoutSize(1435, 800)))
    return store


@pytest.fixture
def recorder():
    """Listener that records every notified document."""
    class Recorder:
        def __init__(self):
            self.documents = []

        def __call__(self, document):
            self.documents.append(document)

        @property
        def count(self):
            return len(self.documents)

    return Recorder()
