import matplotlib.pyplot as plt

from phasekit.analysis import insulin_glucose_response


fig, (ax_g, ax_i) = plt.subplots(2, 1, sharex=True, figsize=(8, 6))
for tau in (0.0, 30.0, 90.0):
    res = insulin_glucose_response(mode="meals", tau=tau)
    ax_g.plot(res.time, res.glucose, label=f"tau={tau:g} min")
    ax_i.plot(res.time, res.insulin)

ax_g.set_ylabel("Glucose (mmol/L)")
ax_i.set_ylabel("Insulin (pmol/L)")
ax_i.set_xlabel("Time (h)")
ax_g.legend()
plt.show()
