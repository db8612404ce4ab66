"""ridebook zones: print time in zone and metrics for every ride in a directory."""

from __future__ import annotations

import click

from ridebook.rides.collection import RideCollection
from ridebook.zones.schedule import ZoneSchedule

from .common import configure_logging, format_duration, load_config, load_schedule


def _echo_zones(label: str, schedule: ZoneSchedule, range_index: int, count: int, getter) -> None:
    if count == 0:
        click.echo(f"  {label}: no zones in effect")
        return
    for zone in range(count):
        name = schedule.zone_name(range_index, zone)
        click.echo(f"  {label} {name:<18} {format_duration(getter(zone))}")


@click.command()
@click.argument("rides_dir", required=False, type=click.Path(file_okay=False))
@click.option("--power-zones", "power_file", type=click.Path(dir_okay=False), help="Power zone YAML/JSON file.")
@click.option("--hr-zones", "hr_file", type=click.Path(dir_okay=False), help="Heart-rate zone YAML/JSON file.")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="Ridebook config file.")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
@click.option("--metrics/--no-metrics", "show_metrics", default=True, help="Also print ride metrics.")
def zones(rides_dir, power_file, hr_file, config_file, log_level, show_metrics) -> None:
    """Report time in each power and heart-rate zone for every ride."""
    config = load_config(config_file)
    configure_logging(config, log_level)

    rides_dir = rides_dir or config.get_path("paths.rides_dir")
    power = load_schedule(power_file or config.get_path("zones.power_file"), "power")
    hr = load_schedule(hr_file or config.get_path("zones.hr_file"), "hr")

    collection = RideCollection(rides_dir, power, hr)
    collection.scan()
    if not len(collection):
        click.echo(f"No rides found in {rides_dir}")
        return

    for entry in collection:
        click.echo(f"{entry.file_name}  {entry.start_time:%Y-%m-%d %H:%M}")
        if entry.ride() is None:
            click.echo(f"  could not load: {'; '.join(entry.errors)}")
            continue
        _echo_zones("power", power, entry.zone_range(), entry.num_zones(), entry.time_in_zone)
        _echo_zones("hr", hr, entry.hr_zone_range(), entry.num_hr_zones(), entry.time_in_hr_zone)
        if show_metrics:
            for name, value in entry.metrics().items():
                metric = collection.metrics.get(name)
                units = f" {metric.units}" if metric is not None and metric.units else ""
                click.echo(f"  {name:<24} {value:.1f}{units}")
        entry.free_memory()
