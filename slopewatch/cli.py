"""Command-line interface for SlopeWatch."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
import structlog
import yaml

from slopewatch.config import get_config, reload_config
from slopewatch.features import FeatureSet
from slopewatch.risk.engine import PredictionResult, RiskEngine
from slopewatch.sources.gather import gather_features

# Configure structlog for CLI output
import logging

logging.basicConfig(format="%(message)s", level=logging.INFO)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()

FEATURE_OPTIONS = {
    "rain": "rain",
    "precip": "precip_real",
    "slope": "slope",
    "elevation": "elevation",
    "temp": "temp",
    "code": "code",
    "bulk_density": "bulk_density",
    "clay": "clay",
    "sand": "sand",
    "silt": "silt",
}


def _load_engine(model_config: Path | None) -> RiskEngine:
    """Build an engine from an explicit model file or the configured one."""
    if model_config is None and get_config().risk.model_path:
        model_config = Path(get_config().risk.model_path)
    return RiskEngine(config_path=model_config)


def _echo_prediction(prediction: PredictionResult) -> None:
    details = prediction.details
    click.echo(f"Risk level: {prediction.level.value}")
    if prediction.probability is not None:
        click.echo(f"  Failure probability: {prediction.probability:.2f}")
    click.echo(f"  Factor of safety: {details.FoS:.3f}")
    click.echo(f"  Cohesion: {details.cohesion_base} -> {details.cohesion_effective}")
    click.echo(f"  Friction: {details.friction_base}° -> {details.friction_effective}°")
    click.echo(f"  Shear strength/stress: {details.shear_strength:.3f} / {details.shear_stress:.3f}")
    click.echo(f"\n{prediction.reason}")


@click.group()
@click.option("--config-dir", type=click.Path(exists=True, path_type=Path), help="Configuration directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """SlopeWatch landslide risk engine."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if config_dir:
        reload_config(config_dir)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        click.echo("Configuration loaded")


@cli.command()
@click.option("--features", "features_file", type=click.Path(exists=True, path_type=Path),
              help="JSON file with a feature set (options below override its values)")
@click.option("--rain", type=float, help="Rainfall intensity proxy (precipitation x 10)")
@click.option("--precip", type=float, help="Raw precipitation in mm (sets rain when --rain is absent)")
@click.option("--slope", type=float, help="Slope in degrees")
@click.option("--elevation", type=float, help="Elevation in meters")
@click.option("--temp", type=float, help="Temperature in °C")
@click.option("--code", type=int, help="Weather condition code")
@click.option("--bulk-density", type=float, help="Bulk density in cg/cm³ (130 = 1.3 g/cm³)")
@click.option("--clay", type=float, help="Clay percentage")
@click.option("--sand", type=float, help="Sand percentage")
@click.option("--silt", type=float, help="Silt percentage (derived from clay and sand if omitted)")
@click.option("--water", is_flag=True, help="Mark the point as open water")
@click.option("--model-config", type=click.Path(exists=True, path_type=Path), help="Risk model YAML overrides")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def evaluate(
    features_file: Path | None,
    water: bool,
    model_config: Path | None,
    as_json: bool,
    **options: Any,
) -> None:
    """Evaluate risk for a feature set without fetching live data."""
    data: dict[str, Any] = {}
    if features_file:
        with open(features_file) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"invalid JSON: {e}", param_hint="--features") from e
        if not isinstance(data, dict):
            raise click.BadParameter("feature file must contain a JSON object", param_hint="--features")

    for option, key in FEATURE_OPTIONS.items():
        if options.get(option) is not None:
            data[key] = options[option]
    if options.get("precip") is not None and options.get("rain") is None:
        data["rain"] = options["precip"] * 10
    if water:
        data["isWater"] = True

    try:
        features = FeatureSet.from_dict(data)
        prediction = _load_engine(model_config).evaluate(features)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"data": features.to_dict(), "prediction": prediction.to_dict()}, indent=2))
    else:
        _echo_prediction(prediction)


@cli.command()
@click.option("--lat", type=float, required=True, help="Latitude in degrees")
@click.option("--lng", type=float, required=True, help="Longitude in degrees")
@click.option("--manual-rain", type=float, help="Simulated precipitation in mm (overrides live data)")
@click.option("--model-config", type=click.Path(exists=True, path_type=Path), help="Risk model YAML overrides")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
def predict(lat: float, lng: float, manual_rain: float | None, model_config: Path | None, as_json: bool) -> None:
    """Fetch live data for a point and evaluate its landslide risk."""
    try:
        features, is_simulated = asyncio.run(gather_features(lat, lng, manual_rain=manual_rain))
        prediction = _load_engine(model_config).evaluate(features)
    except Exception as e:
        logger.exception("Prediction failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "location": {"lat": lat, "lng": lng},
            "data": features.to_dict(),
            "prediction": prediction.to_dict(),
            "isSimulated": is_simulated,
        }, indent=2))
        return

    click.echo(f"Location: {lat}, {lng}")
    if is_simulated:
        click.echo(f"  Simulated rainfall: {features.precip_real} mm")
    click.echo(
        f"  Rain: {features.rain} | Slope: {features.slope}° | "
        f"Elevation: {features.elevation} m | Temp: {features.temp}°C"
    )
    click.echo(f"  Soil: clay {features.clay:.0f}% / sand {features.sand:.0f}% / silt {features.silt:.0f}%\n")
    _echo_prediction(prediction)


@cli.command()
@click.option("--host", help="Bind address (default from config)")
@click.option("--port", type=int, help="Port (default from config)")
def serve(host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    import uvicorn

    from slopewatch.api.server import create_app

    config = get_config()
    host = host or config.server.host
    port = port or config.server.port

    logger.info("Starting SlopeWatch API", host=host, port=port)
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    cli()
