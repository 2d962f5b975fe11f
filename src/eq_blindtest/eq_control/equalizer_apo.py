# src/eq_blindtest/eq_control/equalizer_apo.py

import logging
import re
from pathlib import Path

from .. import config
from ..core.filters import Configuration, FilterBand, FilterShape
from ..abtest.session import AudioApplier
from ..errors import AudioApplyFailed, InvalidParameter

logger = logging.getLogger(__name__)

HEADER_LINES = (
    "; EQ blind test live configuration",
    "; Auto-generated - do not edit manually",
)

_PREAMP_RE = re.compile(r"^\s*Preamp:\s*(?P<value>[-+0-9.eE]+)\s*dB", re.IGNORECASE)
_FILTER_RE = re.compile(
    r"^\s*Filter\s*\d*\s*:\s*(?P<status>ON|OFF)\s+(?P<code>\S+)\s+"
    r"Fc\s+(?P<fc>[-+0-9.eE]+)\s*Hz\s+"
    r"Gain\s+(?P<gain>[-+0-9.eE]+)\s*dB\s+"
    r"Q\s+(?P<q>[-+0-9.eE]+)",
    re.IGNORECASE,
)


class EqualizerPreset:
    """
    Represents an Equalizer APO preset configuration.

    Attributes:
        preamp (float): Preamp value in dB (default: 0.0).
        filters (list): List of filter dictionaries, each containing:
            - enabled (bool): True if the filter is enabled.
            - filter_code (str): Filter type code ('PK', 'LSC' or 'HSC').
            - fc (float): Center frequency in Hz.
            - gain (float): Gain in dB.
            - q (float): Q factor.

    Example:
        preset = EqualizerPreset.from_configuration(config_b, trim_db=-1.5)
        preset.apply_to_file("live_config.txt")
    """
    def __init__(self, preamp: float = 0.0):
        self.preamp = preamp
        self.filters = []

    def set_preamp(self, preamp: float):
        self.preamp = preamp

    def add_filter(self, enabled: bool, filter_code: str, fc: float, gain: float, q: float):
        """
        Add a filter to the preset. Any alias accepted by FilterShape.from_code
        is stored as its Equalizer APO code.
        """
        self.filters.append({
            "enabled": enabled,
            "filter_code": FilterShape.from_code(filter_code).eapo_code,
            "fc": fc,
            "gain": gain,
            "q": q,
        })

    def remove_filter(self, index: int):
        """
        Remove the filter at the given index (0-indexed).
        """
        try:
            del self.filters[index]
        except IndexError:
            raise InvalidParameter("Filter index out of range.") from None

    @classmethod
    def from_configuration(cls, configuration: Configuration, trim_db: float = 0.0):
        """
        Build a preset from a Configuration with the trim folded into the preamp.
        """
        preset = cls(preamp=configuration.preamp_db + trim_db)
        for band in configuration.bands:
            preset.add_filter(band.enabled, band.shape.eapo_code,
                              band.center_frequency_hz, band.gain_db, band.q_factor)
        return preset

    def to_configuration(self, name: str = "") -> Configuration:
        """
        Convert back into a validated Configuration. Raises InvalidParameter
        for filters outside the accepted ranges.
        """
        bands = [
            FilterBand(shape=f["filter_code"], center_frequency_hz=f["fc"],
                       gain_db=f["gain"], q_factor=f["q"], enabled=f["enabled"])
            for f in self.filters
        ]
        return Configuration(preamp_db=self.preamp, bands=bands, name=name)

    def to_string(self) -> str:
        """
        Convert the current preset into a text string formatted for Equalizer APO.
        """
        lines = list(HEADER_LINES)
        lines.append(f"Preamp: {self.preamp:.2f} dB")
        for i, filt in enumerate(self.filters, start=1):
            status = "ON" if filt["enabled"] else "OFF"
            lines.append(
                f"Filter {i}: {status} {filt['filter_code']} Fc {filt['fc']:.1f} Hz "
                f"Gain {filt['gain']:.2f} dB Q {filt['q']:.3f}"
            )
        return "\n".join(lines) + "\n"

    def apply_to_file(self, config_path: str):
        """
        Write the preset configuration to the given file path.
        """
        try:
            with open(config_path, "w") as f:
                f.write(self.to_string())
        except OSError as e:
            logger.error("Failed to write preset to %s: %s", config_path, e)
            raise
        logger.debug("Preset applied to %s", config_path)

    @classmethod
    def from_string(cls, content: str):
        """
        Parse Equalizer APO text. Comment lines (';'), blank lines and other
        commands are ignored; malformed filter lines are logged and skipped.
        """
        preset = cls()
        for line in content.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith(";"):
                continue
            preamp_match = _PREAMP_RE.match(stripped)
            if preamp_match:
                preset.set_preamp(float(preamp_match.group("value")))
                continue
            if not stripped.lower().startswith("filter"):
                continue
            match = _FILTER_RE.match(stripped)
            if match is None:
                logger.warning("Error parsing line: '%s'", line)
                continue
            try:
                preset.add_filter(
                    enabled=match.group("status").upper() == "ON",
                    filter_code=match.group("code"),
                    fc=float(match.group("fc")),
                    gain=float(match.group("gain")),
                    q=float(match.group("q")),
                )
            except (InvalidParameter, ValueError) as e:
                logger.warning("Error parsing line: '%s'. Error: %s", line, e)
        return preset

    @classmethod
    def load_from_file(cls, file_path: str):
        """
        Load a preset configuration from a file and return an EqualizerPreset object.
        """
        with open(file_path, "r") as f:
            content = f.read()
        if not content.strip():
            raise InvalidParameter(f"Preset file {file_path} is empty.")
        return cls.from_string(content)

    @classmethod
    def reset_preset(cls):
        """
        Creates and returns a preset object with no filters and 0 dB preamp,
        effectively resetting the EQ.
        """
        return cls(preamp=0.0)


class EqualizerApoApplier(AudioApplier):
    """
    Audio-apply collaborator that writes the resolved configuration into the
    file Equalizer APO watches. Failures surface as AudioApplyFailed.
    """

    def __init__(self, config_path=None):
        self.config_path = config_path or config.EQ_CONFIG_PATH
        self.last_applied = None

    def apply(self, configuration, applied_trim_db):
        preset = EqualizerPreset.from_configuration(configuration, applied_trim_db)
        try:
            preset.apply_to_file(self.config_path)
        except OSError as e:
            raise AudioApplyFailed(f"Could not write {self.config_path}: {e}") from e
        self.last_applied = preset

    def reset(self):
        """Write a flat preset (0 dB preamp, no filters)."""
        try:
            EqualizerPreset.reset_preset().apply_to_file(self.config_path)
        except OSError as e:
            raise AudioApplyFailed(f"Could not write {self.config_path}: {e}") from e
        self.last_applied = None


def load_configuration(file_path, name=None):
    """Read an Equalizer APO preset file as a Configuration named after the file."""
    preset = EqualizerPreset.load_from_file(file_path)
    return preset.to_configuration(name or Path(file_path).stem)
