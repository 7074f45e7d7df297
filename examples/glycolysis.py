from phasekit.plot import interactive, show


handle = interactive("builtin://glycolysis", start=True)

# a few trajectories around the rest point
for x0, y0 in [(1.2, 1.0), (0.5, 2.5), (2.5, 0.3)]:
    handle.click(x0, y0)

show()
