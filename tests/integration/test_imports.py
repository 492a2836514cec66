from __future__ import annotations

import nbsel
from nbsel import dual, fenchel, op, rng, sort, support, utils, vops


def main() -> None:
    assert nbsel is not None
    assert dual is not None
    assert fenchel is not None
    assert op is not None
    assert rng is not None
    assert sort is not None
    assert support is not None
    assert utils is not None
    assert vops is not None


def test_imports() -> None:
    main()
    for name in nbsel.__all__:
        assert hasattr(nbsel, name)


if __name__ == "__main__":
    main()
