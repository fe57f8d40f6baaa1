"""SpecLoader - loads and validates YAML flow specifications."""

import logging
import yaml
from pathlib import Path
from typing import Optional, List
from .schema import FlowSpec

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent.parent


class SpecLoader:
    """
    Loads flow specifications from YAML files.

    Validates structure using Pydantic models.
    """

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize loader.

        Args:
            base_path: Directory containing a flows/ folder (default: the installed package)
        """
        if base_path is None:
            base_path = PACKAGE_ROOT
        self.base_path = Path(base_path)

    def load_flow(self, flow_name: str) -> FlowSpec:
        """
        Load a flow definition from YAML.

        Args:
            flow_name: Name of flow (e.g., 'biorhythm')

        Returns:
            Validated FlowSpec instance

        Raises:
            FileNotFoundError: If flow file doesn't exist
            ValueError: If the file is not a YAML mapping
            ValidationError: If YAML doesn't match schema
        """
        flow_path = self.base_path / "flows" / f"{flow_name}.yaml"

        if not flow_path.exists():
            raise FileNotFoundError(f"Flow not found: {flow_path}")

        with open(flow_path, 'r') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Flow file {flow_path} must contain a mapping")

        spec = FlowSpec.model_validate(data)
        logger.debug("Loaded flow '%s' (%d steps) from %s", spec.name, len(spec.steps), flow_path)
        return spec

    def available_flows(self) -> List[str]:
        """Return the names of all flow files under flows/."""
        flows_dir = self.base_path / "flows"
        if not flows_dir.is_dir():
            return []
        return sorted(path.stem for path in flows_dir.glob("*.yaml"))
