"""
Config loader for clusterbench.

Parses kconfig-style .config files (CONFIG_KEY=value) or YAML files into PipelineConfig.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from .config import ALL_METHODS, PipelineConfig

_COVARIANCE_TYPES = ("full", "tied", "diag", "spherical")


def _parse_config_file(path: Path) -> Dict[str, object]:
    """Parse a kconfiglib .config into {KEY: value} (without CONFIG_ prefix)."""
    values: Dict[str, object] = {}
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, raw = line.partition("=")
            key = key.strip()
            if key.startswith("CONFIG_"):
                key = key[len("CONFIG_"):]
            raw = raw.strip()
            if raw.startswith('"') and raw.endswith('"'):
                raw = raw[1:-1]
            if raw == "y":
                values[key] = True
            elif raw == "n":
                values[key] = False
            else:
                try:
                    values[key] = int(raw)
                except ValueError:
                    try:
                        values[key] = float(raw)
                    except ValueError:
                        values[key] = raw
    return values


def _parse_yaml_file(path: Path) -> Dict[str, object]:
    """Parse a YAML mapping; keys are upper-cased to match the .config spelling."""
    import yaml

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a mapping, got {type(data).__name__}")
    return {str(k).upper(): v for k, v in data.items()}


def _parse_int_list(raw: object) -> Tuple[int, ...]:
    """Parse '5,10', a single int, or a YAML list."""
    if isinstance(raw, (list, tuple)):
        return tuple(int(x) for x in raw)
    if isinstance(raw, int):
        return (raw,)
    parts = [p.strip() for p in str(raw).split(",") if p.strip()]
    return tuple(int(p) for p in parts)


def _parse_methods(raw: object) -> Tuple[str, ...]:
    """Parse 'all' or comma-separated method names."""
    if isinstance(raw, (list, tuple)):
        return tuple(str(m).strip().lower() for m in raw)
    text = str(raw).strip()
    if not text or text.lower() == "all":
        return ALL_METHODS
    return tuple(p.strip().lower() for p in text.split(",") if p.strip())


def validate_config(cfg: PipelineConfig) -> None:
    """Validate all options; raise a single ValueError listing every problem."""
    errors: List[str] = []

    if not cfg.cluster_counts:
        errors.append("CONFIG_CLUSTER_COUNTS must name at least one k")
    for k in cfg.cluster_counts:
        if k < 1:
            errors.append(f"CONFIG_CLUSTER_COUNTS entries must be >= 1 (got {k})")
    unknown = [m for m in cfg.methods if m not in ALL_METHODS]
    if unknown:
        errors.append(
            f"CONFIG_METHODS has unknown methods {unknown}; choose from {list(ALL_METHODS)}"
        )
    if not cfg.methods:
        errors.append("CONFIG_METHODS must name at least one method")
    if cfg.min_term_length < 1:
        errors.append("CONFIG_MIN_TERM_LENGTH must be >= 1")
    if not 0.0 <= cfg.min_doc_fraction < 1.0:
        errors.append(
            f"CONFIG_MIN_DOC_FRACTION must be in [0, 1) (got {cfg.min_doc_fraction})"
        )
    if cfg.kmeans_restarts < 1:
        errors.append("CONFIG_KMEANS_RESTARTS must be >= 1")
    if cfg.kmeans_max_iter < 1:
        errors.append("CONFIG_KMEANS_MAX_ITER must be >= 1")
    if cfg.pam_max_iter < 1:
        errors.append("CONFIG_PAM_MAX_ITER must be >= 1")
    if cfg.embedding_dim < 1:
        errors.append("CONFIG_EMBEDDING_DIM must be >= 1")
    if cfg.umap_neighbors < 2:
        errors.append("CONFIG_UMAP_NEIGHBORS must be >= 2")
    if cfg.gmm_covariance_type not in _COVARIANCE_TYPES:
        errors.append(
            f"CONFIG_GMM_COVARIANCE_TYPE must be one of {_COVARIANCE_TYPES} "
            f"(got {cfg.gmm_covariance_type!r})"
        )
    if cfg.gmm_max_iter < 1:
        errors.append("CONFIG_GMM_MAX_ITER must be >= 1")
    if cfg.lda_max_iter < 1:
        errors.append("CONFIG_LDA_MAX_ITER must be >= 1")
    if cfg.top_n_terms < 1:
        errors.append("CONFIG_TOP_N_TERMS must be >= 1")
    if cfg.n_jobs == 0:
        errors.append("CONFIG_N_JOBS must be non-zero (use -1 for all cores)")
    if cfg.max_heavy_jobs < 1:
        errors.append("CONFIG_MAX_HEAVY_JOBS must be >= 1")

    if errors:
        raise ValueError(
            "Pipeline config validation failed:\n  " + "\n  ".join(errors)
        )


def config_from_mapping(v: Dict[str, object]) -> PipelineConfig:
    """Build a PipelineConfig from {KEY: value}; missing keys keep their defaults."""
    d = PipelineConfig()
    cfg = PipelineConfig(
        cluster_counts=_parse_int_list(v["CLUSTER_COUNTS"]) if "CLUSTER_COUNTS" in v else d.cluster_counts,
        methods=_parse_methods(v["METHODS"]) if "METHODS" in v else d.methods,
        seed=int(v.get("SEED", d.seed)),
        min_term_length=int(v.get("MIN_TERM_LENGTH", d.min_term_length)),
        min_doc_fraction=float(v.get("MIN_DOC_FRACTION", d.min_doc_fraction)),
        kmeans_restarts=int(v.get("KMEANS_RESTARTS", d.kmeans_restarts)),
        kmeans_max_iter=int(v.get("KMEANS_MAX_ITER", d.kmeans_max_iter)),
        pam_max_iter=int(v.get("PAM_MAX_ITER", d.pam_max_iter)),
        embedding_dim=int(v.get("EMBEDDING_DIM", d.embedding_dim)),
        umap_neighbors=int(v.get("UMAP_NEIGHBORS", d.umap_neighbors)),
        umap_min_dist=float(v.get("UMAP_MIN_DIST", d.umap_min_dist)),
        gmm_covariance_type=str(v.get("GMM_COVARIANCE_TYPE", d.gmm_covariance_type)),
        gmm_max_iter=int(v.get("GMM_MAX_ITER", d.gmm_max_iter)),
        lda_max_iter=int(v.get("LDA_MAX_ITER", d.lda_max_iter)),
        top_n_terms=int(v.get("TOP_N_TERMS", d.top_n_terms)),
        n_jobs=int(v.get("N_JOBS", d.n_jobs)),
        max_heavy_jobs=int(v.get("MAX_HEAVY_JOBS", d.max_heavy_jobs)),
    )
    validate_config(cfg)
    return cfg


def load_config(config_path: str | Path) -> PipelineConfig:
    """Load a .config or .yaml/.yml file and return a validated PipelineConfig."""
    p = Path(config_path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    if p.suffix.lower() in (".yaml", ".yml"):
        values = _parse_yaml_file(p)
    else:
        values = _parse_config_file(p)
    return config_from_mapping(values)
