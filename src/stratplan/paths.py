from pathlib import Path


def project_root() -> Path:
    # src/stratplan/paths.py -> root is 3 levels up
    return Path(__file__).resolve().parents[2]


def path_from_root(relative_path: str | Path) -> Path:
    path = Path(relative_path)
    if path.is_absolute():
        return path
    return project_root() / path
