from .equalizer_apo import EqualizerApoApplier, EqualizerPreset, load_configuration

__all__ = ["EqualizerApoApplier", "EqualizerPreset", "load_configuration"]
