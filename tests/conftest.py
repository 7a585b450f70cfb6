"""
Shared fixtures for fieldrecon tests
"""

import copy

import pytest

from fieldrecon.llm import Completion, TokenUsage
from fieldrecon.registry.models import CanonicalRegistry


REGISTRY_DOC = {
    "metadata": {
        "version": "1.0",
        "lastModified": "2025-01-01T00:00:00Z",
        "lastModifiedBy": "system",
        "totalFundamentalFieldCount": 4,
        "description": "Fundamental fields of the grant application",
        "source": "Contest guidelines",
    },
    "categories": {
        "projectData": {
            "name": "Project information",
            "description": "Project-specific data",
            "active": True,
            "fields": {
                "PROJECT_TITLE": {
                    "type": "text",
                    "obligatory": True,
                    "description": "Project title",
                    "active": True,
                    "isFundamental": True,
                    "referenceNumber": "1.1",
                    "learnedLabelVariants": ["Nombre Proyecto"],
                },
                "PROJECT_SUMMARY": {
                    "type": "textarea",
                    "obligatory": True,
                    "description": "Resumen ejecutivo del proyecto",
                    "active": True,
                    "isFundamental": True,
                    "learnedLabelVariants": [],
                },
                "INTERNAL_CODE": {
                    "type": "text",
                    "obligatory": False,
                    "description": "Internal code",
                    "active": True,
                    "isFundamental": False,
                    "learnedLabelVariants": [],
                },
            },
        },
        "legalRepresentative": {
            "name": "Legal representative",
            "description": "Legal representative of the applicant",
            "active": True,
            "fields": {
                "REPRESENTATIVE_RUT": {
                    "type": "text",
                    "obligatory": True,
                    "description": "RUT del representante legal",
                    "active": True,
                    "isFundamental": True,
                    "referenceNumber": "2.1",
                    "learnedLabelVariants": ["RUT Representante"],
                },
                "REPRESENTATIVE_EMAIL": {
                    "type": "email",
                    "obligatory": False,
                    "description": "Correo electrónico del representante",
                    "active": True,
                    "isFundamental": True,
                    "learnedLabelVariants": [],
                },
            },
        },
        "archived": {
            "name": "Archived",
            "description": "Fields from previous editions",
            "active": False,
            "fields": {
                "OLD_FIELD": {
                    "type": "text",
                    "obligatory": True,
                    "description": "Old field",
                    "active": True,
                    "isFundamental": True,
                    "learnedLabelVariants": [],
                },
            },
        },
    },
}


def make_execution(*fields, step_title="Step 1"):
    """Execution record with one step holding the given field details."""
    return {"completedSteps": [{"stepTitle": step_title, "fieldDetails": list(fields)}]}


class FakeClassifier:
    """
    Completion client double.

    Each call consumes the next scripted response; an Exception instance is raised.
    """

    def __init__(self, responses=None, usage=(100, 20)):
        self.responses = list(responses or [])
        self.usage = usage
        self.calls = []

    async def classify(self, system_prompt, user_prompt, temperature=0.2):
        self.calls.append({"system": system_prompt, "user": user_prompt, "temperature": temperature})
        response = self.responses.pop(0) if self.responses else "[]"
        if isinstance(response, Exception):
            raise response
        return Completion(text=response, usage=TokenUsage(*self.usage))


@pytest.fixture
def registry_doc():
    return copy.deepcopy(REGISTRY_DOC)


@pytest.fixture
def registry(registry_doc):
    return CanonicalRegistry.from_dict(registry_doc)


@pytest.fixture
def scenario_registry():
    """Single fundamental field: projectData.PROJECT_TITLE"""
    return CanonicalRegistry.from_dict({
        "metadata": {"version": "1.0"},
        "categories": {
            "projectData": {
                "name": "Project information",
                "description": "Project-specific data",
                "active": True,
                "fields": {
                    "PROJECT_TITLE": {
                        "type": "text",
                        "obligatory": True,
                        "description": "Project title",
                        "active": True,
                        "isFundamental": True,
                        "learnedLabelVariants": ["Nombre Proyecto"],
                    },
                },
            },
        },
    })


@pytest.fixture
def fake_classifier():
    return FakeClassifier
