"""Basic usage example for the atmosphere client."""

import sys

from atmosphere import AtmosphereClient, classify_incident
from atmosphere.wastewater import latest_measurement


def main() -> None:
    address = sys.argv[1] if len(sys.argv) > 1 else "193.50.135.1"

    with AtmosphereClient() as client:
        report = client.report(address, concurrent=True)

    coords = report.coordinates
    print(f"=== Location ({coords.source.value}) ===")
    print(f"  {coords.city}, {coords.region} ({coords.lat:.4f}, {coords.lon:.4f})")

    print("\n=== Weather ===")
    if report.weather is None:
        print("  Unavailable.")
    else:
        for p in report.weather.periods:
            kind = p.precip_kind.value if p.precip_kind else "n/a"
            print(
                f"  {p.period.value:<10} {p.temp_min}..{p.temp_max}°C, "
                f"rain {p.precip_probability}% ({kind}), wind {p.wind_force} km/h"
            )

    print(f"\n=== Traffic ({len(report.traffic_incidents)} incidents) ===")
    for incident in report.traffic_incidents[:5]:
        style = classify_incident(incident)
        print(f"  [{style.category.value}] {incident.description}")

    print("\n=== Wastewater ===")
    latest = latest_measurement(report.wastewater_series)
    if latest is None:
        print("  No measurements.")
    else:
        print(f"  {latest.station} {latest.date}: {latest.value} ({report.wastewater_trend.value})")

    print("\n=== Air quality ===")
    aq = report.air_quality
    label = " (synthetic)" if aq.is_synthetic else ""
    print(f"  {aq.location}: index {aq.overall_index}{label}")

    rec = report.recommendation
    verdict = "take the car" if rec.use_car_recommended else "take public transport"
    print(f"\n=== Recommendation: {verdict} (score {rec.score}) ===")
    for reason in rec.reasons:
        print(f"  - {reason}")


if __name__ == "__main__":
    main()
