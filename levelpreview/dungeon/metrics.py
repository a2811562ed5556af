from typing import Dict


def init_metrics() -> Dict[str, int | float | bool | None | dict]:
    return {
        'attempts': 0,
        'placement_vetoes': 0,
        'connectivity_vetoes': 0,
        'vaults_placed': 0,
        'random_vaults_disabled_at': None,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
