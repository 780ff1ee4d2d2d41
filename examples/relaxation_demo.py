#!/usr/bin/env python3
"""
Demo script comparing the two interior relaxation operators.
"""

from py_hexagrid.core import GridConfig, analyze_grid, generate_grid, relax_grid
from py_hexagrid.render import GridPlotter


def main():
    """Relax the same grid with both operators and report quad area spread."""
    print("Hexagrid Relaxation Demo")
    print("=" * 40)

    config = GridConfig(size=8, max_iteration_count=10, force_circle_shape=True)
    seed = 20190908

    for mode in ("simple", "weighted"):
        grid = generate_grid(config, seed=seed)
        before = analyze_grid(grid)

        print(f"\n{mode.upper()} relaxation:")
        print("-" * 30)
        print(f"Points: {before['points']}, quads: {before['quads']}, "
              f"unpaired triangles: {before['unpaired_triangles']}")
        print(f"Area variation before: {before['area_cv']:.4f}")

        done = 0
        for target in (5, 20, 50):
            relax_grid(grid, target - done, mode=mode, relax_side=True)
            done = target
            stats = analyze_grid(grid)
            print(f"  after {target:3d} passes: {stats['area_cv']:.4f}")

        plotter = GridPlotter(grid)
        plotter.save(f"hexagrid_{mode}.png")
        plotter.close()
        print(f"Saved hexagrid_{mode}.png")


if __name__ == "__main__":
    main()
