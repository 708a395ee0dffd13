"""Daily go/no-go running verdict from weather and air-quality forecasts."""
