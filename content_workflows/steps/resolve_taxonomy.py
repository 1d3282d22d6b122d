"""Built-in step mapping categories and tags to the target language."""

from __future__ import annotations

from typing import Any, Dict, List

from ..context.base import WorkflowContext
from .base import WorkflowStep

DEFAULT_TAXONOMIES = ["category", "post_tag"]

# Taxonomy name -> document path
TAXONOMY_PATHS = {
    "category": "taxonomy.categories",
    "post_tag": "taxonomy.tags",
}


def taxonomy_path(taxonomy: str) -> str:
    return TAXONOMY_PATHS.get(taxonomy, f"taxonomy.{taxonomy}")


class ResolveTaxonomyStep(WorkflowStep):
    """Replace each term list with its resolutions.

    Every term of a configured taxonomy becomes
    ``{original, resolved, status, message}``. Read-only towards the term
    store, so it runs on virtual contexts.
    """

    def get_id(self) -> str:
        return "resolve_taxonomy"

    def get_name(self) -> str:
        return "Resolve Taxonomy"

    def get_description(self) -> str:
        return (
            "Resolves taxonomy terms (categories, tags) to their target language "
            "equivalents using term translations."
        )

    def get_required_services(self) -> List[str]:
        return ["TaxonomyResolver"]

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        errors = []
        taxonomies = config.get("taxonomies")
        if taxonomies is not None and not isinstance(taxonomies, list):
            errors.append("taxonomies must be an array")
        return errors

    def execute(self, context: WorkflowContext, config: Dict[str, Any]) -> None:
        resolver = context.get_service("TaxonomyResolver")
        source_language = context.get_source_language()
        target_language = context.get_target_language()

        for taxonomy in config.get("taxonomies") or DEFAULT_TAXONOMIES:
            path = taxonomy_path(taxonomy)
            terms = context.get(path)
            if not terms or not isinstance(terms, list):
                continue

            if not resolver.is_available(taxonomy):
                self.log(context, f"Resolver not available for taxonomy: {taxonomy}")
                continue

            resolutions = resolver.resolve_batch(taxonomy, terms, source_language, target_language)
            context.set(path, [resolution.to_dict() for resolution in resolutions])

            matched = sum(1 for resolution in resolutions if resolution.is_resolved())
            self.log(context, f"Resolved {matched}/{len(resolutions)} terms for {taxonomy}")
