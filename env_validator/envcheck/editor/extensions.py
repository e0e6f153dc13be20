"""Advisory check for extension recommendations (.vscode/extensions.json)."""

from __future__ import annotations

from typing import Any

from envcheck.validator.aggregator import create_success_result, create_warning
from envcheck.validator.models import ValidationResult

SOURCE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".java", ".rs")
SOURCE_SEARCH_DEPTH = 3


def check_extensions_document(
    doc: Any | None, has_sources: bool, file: str | None = None,
) -> ValidationResult:
    """``doc`` is None when the document does not exist."""
    if doc is None:
        warnings = []
        if has_sources:
            warnings.append(
                create_warning(
                    "NO_EXTENSIONS_RECOMMENDATIONS",
                    "No extensions.json found",
                    "Consider adding recommended extensions for your project type",
                    file=file,
                )
            )
        return create_success_result(
            "Extensions recommendations not present (optional)", warnings=warnings,
        )

    data = doc if isinstance(doc, dict) else {}
    recommendations = data.get("recommendations")
    unwanted = data.get("unwantedRecommendations")
    warnings = []
    if not isinstance(recommendations, list):
        warnings.append(
            create_warning(
                "NO_RECOMMENDATIONS",
                "extensions.json should contain a recommendations array",
                "Add recommended extensions for your project",
                file=file,
            )
        )

    return create_success_result(
        "Extensions configuration is valid",
        {
            "recommended_count": len(recommendations) if isinstance(recommendations, list) else 0,
            "unwanted_count": len(unwanted) if isinstance(unwanted, list) else 0,
        },
        warnings,
    )
