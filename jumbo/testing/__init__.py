from .aggregate_scenario import AggregateScenario

__all__ = ["AggregateScenario"]
