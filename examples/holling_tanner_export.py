from phasekit import ManualScheduler, PhasePortraitEngine, load_preset
from phasekit.plot import export_frame


preset = load_preset("holling-tanner")
scheduler = ManualScheduler()
engine = PhasePortraitEngine.from_preset(preset, scheduler=scheduler, width=800, height=800)

for eq in engine.equilibria:
    print(f"({eq.x:.4f}, {eq.y:.4f})  {eq.label}")

engine.set_params({"c": 1.5})
engine.seed(1.0, 1.5)
engine.seed(0.2, 0.4)
engine.start()
scheduler.tick(600)

print(export_frame(engine, "holling_tanner.png"))
