"""Shared fixtures: a trimmed Personality Insights v2 response."""
import copy

import pytest


SAMPLE_RESPONSE = {
    "id": "*UNKNOWN*",
    "source": "*UNKNOWN*",
    "word_count": 1205,
    "processed_lang": "en",
    "tree": {
        "id": "r",
        "name": "root",
        "children": [
            {
                "id": "personality",
                "name": "Big 5",
                "children": [
                    {
                        "id": "Openness_parent",
                        "name": "Openness",
                        "category": "personality",
                        "percentage": 0.9885,
                        "children": [
                            {
                                "id": "Openness",
                                "name": "Openness",
                                "category": "personality",
                                "percentage": 0.9885,
                                "children": [
                                    {"id": "Adventurousness", "name": "Adventurousness", "percentage": 0.6321},
                                    {"id": "Intellect", "name": "Intellect", "percentage": 0.4212},
                                ],
                            },
                            {
                                "id": "Conscientiousness",
                                "name": "Conscientiousness",
                                "category": "personality",
                                "percentage": 0.1,
                                "children": [
                                    {"id": "Orderliness", "name": "Orderliness", "percentage": 1.0},
                                ],
                            },
                        ],
                    }
                ],
            },
            {
                "id": "needs",
                "name": "Needs",
                "children": [
                    {
                        "id": "Stability_parent",
                        "name": "Stability",
                        "category": "needs",
                        "percentage": 0.25,
                        "children": [
                            {"id": "Challenge", "name": "Challenge", "percentage": 0.5},
                            {"id": "Closeness", "name": "Closeness", "percentage": 0.25},
                            {"id": "Curiosity", "name": "Curiosity", "percentage": 0.75},
                        ],
                    }
                ],
            },
        ],
    },
}


@pytest.fixture
def sample_response():
    return copy.deepcopy(SAMPLE_RESPONSE)
