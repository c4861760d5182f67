from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..errors import ConfigurationError, EmptyInputError
from ..observability import get_logger
from .models import EthicalProfile
from .templates import TEMPLATES, GenerationConfig

log = get_logger(__name__)

DEFAULT_TEMPLATE = "standard"

ConfigLike = Union[GenerationConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike) -> GenerationConfig:
    """Turn a dict of options (snake_case or camelCase) into a ``GenerationConfig``."""
    if config is None:
        return GenerationConfig()
    if isinstance(config, GenerationConfig):
        return config
    try:
        return GenerationConfig.model_validate(dict(config))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"invalid generation config: {problems}")


def resolve_template(template: Optional[str]):
    template_id = template or DEFAULT_TEMPLATE
    try:
        return TEMPLATES[template_id]
    except KeyError:
        raise ConfigurationError(
            f"unknown template {template_id!r}; available: {', '.join(TEMPLATES)}",
            template=template_id,
        )


def generate(profile: EthicalProfile, template: Optional[str] = None, config: ConfigLike = None) -> str:
    """Render a profile as a VALUES.md document.

    Template and config are checked before anything is rendered. The output
    depends only on the arguments, so equal inputs give identical markdown.
    """
    tpl = resolve_template(template)
    cfg = resolve_config(config)
    if profile.total_responses == 0 or not profile.primary_motifs:
        raise EmptyInputError("cannot generate a document for an empty profile")

    sections = tpl.render(profile, cfg)
    markdown = "\n\n".join(s for s in sections if s) + "\n"
    log.debug("values_generated", template=tpl.template_id, chars=len(markdown))
    return markdown


def list_templates() -> List[Dict[str, Any]]:
    return [
        {
            "id": t.template_id,
            "name": t.name,
            "description": t.description,
            "focusAreas": list(t.focus_areas),
        }
        for t in TEMPLATES.values()
    ]
