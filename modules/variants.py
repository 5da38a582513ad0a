"""
Deployment variants
One validated flag selects exactly one variant; the variant carries every
safety setting that may differ between production and non-production.
"""

import pulumi
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from config import ClusterSpec

VARIANT_OUTPUT = "variant"


class VariantSwitchError(Exception):
    """Raised when a deployed stack is asked to change variant in place"""


@dataclass(frozen=True)
class ProdVariant:
    """Production: deletion-protected cluster, retained dataset, pinned channel"""

    release_channel: str

    name: ClassVar[str] = "prod"
    retain_on_destroy: ClassVar[bool] = True
    destruction_protected: ClassVar[bool] = True


@dataclass(frozen=True)
class NonProdVariant:
    """Non-production: everything stays disposable, channel left to the provider"""

    name: ClassVar[str] = "test"
    retain_on_destroy: ClassVar[bool] = False
    destruction_protected: ClassVar[bool] = False
    release_channel: ClassVar[Optional[str]] = None


Variant = Union[ProdVariant, NonProdVariant]


def select_variant(spec: ClusterSpec) -> Variant:
    """Pick the single variant for this spec"""
    if spec.is_prod:
        return ProdVariant(release_channel=spec.release_channel)
    return NonProdVariant()


def both_variants(spec: ClusterSpec) -> tuple:
    """Both variants for the spec, prod first"""
    return ProdVariant(release_channel=spec.release_channel), NonProdVariant()


def check_variant_transition(previous: Optional[str], current: Variant) -> Variant:
    """
    Reject in-place changes of the variant of a deployed stack

    Args:
        previous: Variant name recorded by the last update, None if never deployed
        current: Variant selected for this update

    Returns:
        The current variant, unchanged

    Raises:
        VariantSwitchError: If the stack was deployed as the other variant
    """
    if previous is None or previous == current.name:
        return current

    raise VariantSwitchError(
        f"Stack was deployed as the '{previous}' variant and is now configured as "
        f"'{current.name}'. Switching variants in place is not supported: lift deletion_protection "
        f"on a prod cluster, run pulumi destroy, then deploy again with the new flag."
    )


def self_stack_reference() -> pulumi.StackReference:
    """Reference to this stack's own last-deployed outputs"""
    stack_name = f"{pulumi.get_organization()}/{pulumi.get_project()}/{pulumi.get_stack()}"
    return pulumi.StackReference(f"{stack_name}-variant-guard", stack_name=stack_name)


def guard_variant_switch(variant: Variant, stack_ref=None) -> pulumi.Output:
    """
    Fail the update when the recorded variant differs from the selected one

    Args:
        variant: Variant selected for this update
        stack_ref: Stack reference to read the previous variant from

    Returns:
        Output resolving to the variant name once the check has passed
    """
    stack_ref = stack_ref or self_stack_reference()
    previous = stack_ref.get_output(VARIANT_OUTPUT)

    def _check(previous_name):
        check_variant_transition(previous_name, variant)
        pulumi.log.info(f"Variant guard passed: previous={previous_name}, selected={variant.name}")
        return variant.name

    return previous.apply(_check)
