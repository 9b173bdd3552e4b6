"""MAGERIT Quantitative Risk Engine.

Deterministic risk scoring for asset/threat/vulnerability triads,
configurable probability x impact risk matrices, and stochastic
simulation (Monte Carlo, organizational VaR, scenario analysis).

Example:
    from magerisk.service import RiskEngine
    from magerisk.repository import InMemoryRepository

    repo = InMemoryRepository()
    engine = RiskEngine.from_repository(repo)
    risk = engine.create_calculated_risk("a1", "t1", "v1", "org1", "analyst")
    result = engine.run_monte_carlo_simulation(risk.risk_id, iterations=10_000)
    print(f"p95: {result.confidence_interval.p95:.4f}")
"""

__version__ = "1.0.0"
