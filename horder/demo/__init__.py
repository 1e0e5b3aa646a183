from horder.demo.seed import DEFAULT_CATALOG, seed_default_catalog

__all__ = ["DEFAULT_CATALOG", "seed_default_catalog"]
