"""Values-file rendering: secured artifacts and ``<VAR>`` substitution."""

from deployer.render.artifact import (
    ARTIFACT_MODE,
    VOLATILE_DIR,
    create_artifact,
    destroy_artifact,
    scratch_dir,
    values_artifact,
)
from deployer.render.substitute import (
    MASK,
    apply_placeholders,
    mask_sensitive,
    substitute_placeholders,
    token_pattern,
)

__all__ = [
    "ARTIFACT_MODE",
    "MASK",
    "VOLATILE_DIR",
    "apply_placeholders",
    "create_artifact",
    "destroy_artifact",
    "mask_sensitive",
    "scratch_dir",
    "substitute_placeholders",
    "token_pattern",
    "values_artifact",
]
