"""Stock hooks for bundled plugins that the policy does not require."""

import logging

from .schema import Classification
from .schema import CopyOutcome
from .schema import SourceLocator
from .utils import artifact_id

logger = logging.getLogger(__name__)


def skip_not_required(locator: SourceLocator, file_name: str, classification: Classification) -> CopyOutcome:
    """Leave the plugin out of the installation (default).

    The plugin is still reported back, so its own dependencies get a chance to
    be handled leniently.
    """
    logger.info(
        f"Skipping installation of the {classification.value} bundled plugin {artifact_id(file_name)}, "
        "because it is not a required plugin"
    )
    return CopyOutcome(locator=locator, file_name=file_name, installed=False)


def install_not_required(locator: SourceLocator, file_name: str, classification: Classification) -> None:
    """Decline every time, so all bundled plugins get installed."""
    return None
