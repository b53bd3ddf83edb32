"""Registry of processor realizations read from the configuration directory."""

import logging
import os

from trifonius.errors import ValidationError
from trifonius.processor.config import CONFIG_EXTENSIONS, load_processor_config
from trifonius.processor.types import ProcessorConfig, ProcessorTechnology

logger = logging.getLogger(__name__)

# Sub-directory of <config dir>/processors per technology
TECHNOLOGY_DIRS = {
    ProcessorTechnology.DSH_SERVICE: "dshservice",
    ProcessorTechnology.DSH_APP: "dshapp",
}


class ProcessorRegistry:
    """Processor configurations keyed by realization id."""

    def __init__(self, configs=None):
        self._configs: dict[str, ProcessorConfig] = {}
        for config in configs or []:
            self.add(config)

    def add(self, config: ProcessorConfig):
        if config.realization_id in self._configs:
            raise ValidationError(f"processor realization '{config.realization_id}' is defined more than once")
        self._configs[config.realization_id] = config

    def get(self, realization_id: str) -> ProcessorConfig:
        config = self._configs.get(realization_id)
        if config is None:
            available = ", ".join(sorted(self._configs)) or "none"
            raise ValidationError(f"processor realization '{realization_id}' not found. Available: {available}")
        return config

    def configs(self, technology: ProcessorTechnology | None = None) -> list[ProcessorConfig]:
        return [
            self._configs[k]
            for k in sorted(self._configs)
            if technology is None or self._configs[k].technology == technology
        ]

    def __len__(self) -> int:
        return len(self._configs)

    @classmethod
    def from_config_dir(cls, config_dir: str) -> "ProcessorRegistry":
        """Load every processor configuration below ``<config_dir>/processors``."""
        registry = cls()
        processors_dir = os.path.join(config_dir, "processors")
        for technology, subdir in TECHNOLOGY_DIRS.items():
            directory = os.path.join(processors_dir, subdir)
            if not os.path.isdir(directory):
                logger.debug(f"No {technology} processors directory: {directory}")
                continue
            for filename in sorted(os.listdir(directory)):
                if not filename.endswith(CONFIG_EXTENSIONS):
                    continue
                registry.add(load_processor_config(os.path.join(directory, filename), technology))
        logger.debug(f"Loaded {len(registry)} processor realization(s) from {processors_dir}")
        return registry
