"""Tests for the Prometheus exposition of a population."""
from churnbird.config import PrometheusExporterConfig
from churnbird.population import Population
from churnbird.prom_exporter import PrometheusExporter, to_metric_family
from churnbird.series import Family, Series


def sample_lines(text, name):
    return [
        line for line in text.splitlines()
        if not line.startswith("#") and line.split("{")[0] == name
    ]


def test_render_exposes_every_family():
    """Each family appears as a gauge with one sample per series."""
    population = Population.generate(num_families=3, max_series_per_family=6, seed=1)
    exporter = PrometheusExporter(PrometheusExporterConfig(), population)

    text = exporter.render().decode("utf-8")

    for family in population.families:
        assert f"# TYPE {family.name} gauge" in text
        assert len(sample_lines(text, family.name)) == len(family.series)
    assert 'fixed_label="' in text
    assert exporter.collector.scrape_count == 1


def test_each_scrape_redraws_values():
    population = Population.generate(num_families=1, max_series_per_family=6, seed=3)
    exporter = PrometheusExporter(PrometheusExporterConfig(), population)

    first = exporter.render()
    second = exporter.render()

    assert first != second
    assert exporter.collector.scrape_count == 2


def test_no_default_process_metrics():
    """Only the generated families are exported."""
    population = Population.generate(num_families=2, max_series_per_family=2, seed=4)
    text = PrometheusExporter(PrometheusExporterConfig(), population).render().decode("utf-8")

    assert "process_" not in text
    assert "python_gc" not in text
    types = [line for line in text.splitlines() if line.startswith("# TYPE")]
    assert len(types) == 2


def test_to_metric_family_samples():
    family = Family(
        name="abc",
        series=[Series((("k", "v"), ("fixed_label", "a")), 1.5)],
    )

    metric = to_metric_family(family)

    assert metric.name == "abc"
    assert metric.type == "gauge"
    assert len(metric.samples) == 1
    assert metric.samples[0].labels == {"k": "v", "fixed_label": "a"}
    assert metric.samples[0].value == 1.5
