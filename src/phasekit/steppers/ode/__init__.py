# src/phasekit/steppers/ode/__init__.py
