"""Renders the feature index for the console or as JSON."""

from __future__ import annotations

import json
from typing import List, Mapping, Sequence

from .models import TestDataMethod


def render_text(features: Mapping[str, Sequence[TestDataMethod]], *, marker: str = "TestData") -> str:
    """Group methods under ``Feature:`` headings, features sorted by name."""
    if not features:
        return f"No @{marker} methods found.\n"
    lines: List[str] = []
    for feature in sorted(features):
        lines.append(f"Feature: {feature}")
        for method in features[feature]:
            lines.append(
                f"  [{method.repo}] {method.class_name}#{method.method_name} ({method.path})"
            )
            if method.annotation_attrs:
                attrs = ", ".join(f"{key}={value}" for key, value in method.annotation_attrs.items())
                lines.append(f"    @{marker} attrs: {{{attrs}}}")
    return "\n".join(lines) + "\n"


def render_json(features: Mapping[str, Sequence[TestDataMethod]]) -> str:
    payload = {
        feature: [method.to_dict() for method in features[feature]] for feature in sorted(features)
    }
    return json.dumps(payload, indent=2) + "\n"


__all__ = ["render_json", "render_text"]
