import os

import pytest

from segmentor.core.errors import ConfigurationError
from segmentor.core.models import CustomerRecord, Midpoint, ReportItem, ValidationReport
from segmentor.core.processing.load_data import DataLoader
from segmentor.core.segment.config import SegmentationConfig
from segmentor.core.segment.data_manager import DataManager
from segmentor.core.segment.segmentation import QuadrantSegmentation

POINTS = [(3, 5), (4, 4), (5, 5), (1, 1), (5, 1), (1, 5), (2, 2), (4, 1), (3, 3), (5, 3)]


@pytest.fixture
def records():
    return [
        CustomerRecord(id=f"CUST-{i:04d}", satisfaction=s, loyalty=l)
        for i, (s, l) in enumerate(POINTS, start=1)
    ]


@pytest.fixture
def segmentation(records):
    return QuadrantSegmentation(records, SegmentationConfig())


def _counts(distribution):
    return dict(zip(distribution["segment"], distribution["Count"]))


def test_run_pipeline(segmentation) -> None:
    classified, distribution, proximity = segmentation.run()

    assert list(classified["segment"])[:3] == ["loyalists", "loyalists", "apostles"]
    assert "segment_name" in classified.columns

    counts = _counts(distribution)
    assert counts["loyalists"] == 4
    assert counts["mercenaries"] == 2
    assert counts["apostles"] == 1
    assert counts["terrorists"] == 1
    assert counts["near_apostles"] == 0
    assert distribution["Count"].sum() == 10
    loyalists = distribution[distribution["segment"] == "loyalists"].iloc[0]
    assert loyalists["Percentage"] == 40.0

    assert proximity.available is True
    assert proximity.total_active == 10


def test_exclude_removes_record_from_statistics(segmentation) -> None:
    segmentation.run()
    assert segmentation.exclude("CUST-0009") == 1

    distribution = segmentation.calculate_distribution()
    assert _counts(distribution)["loyalists"] == 3
    assert distribution["Count"].sum() == 9
    assert segmentation.analyze_proximity().total_active == 9

    assert segmentation.exclude("CUST-0009") == 0
    assert segmentation.include("CUST-0009") == 1
    assert _counts(segmentation.calculate_distribution())["loyalists"] == 4


def test_set_midpoint_reclassifies(segmentation) -> None:
    segmentation.run()
    geometry = segmentation.set_midpoint(Midpoint(4, 4))

    assert geometry.midpoint == Midpoint(4, 4)
    assert segmentation.config.midpoint == Midpoint(4, 4)
    assert segmentation.classify()["segment"].iloc[0] == "hostages"


def test_invalid_midpoint_keeps_previous_state(segmentation) -> None:
    classified, _, _ = segmentation.run()
    with pytest.raises(ConfigurationError):
        segmentation.set_midpoint(Midpoint(5, 3))

    assert segmentation.config.midpoint == Midpoint(3, 3)
    assert segmentation.classify() is classified


def test_zone_crossing_midpoint_is_rejected(records) -> None:
    segmentation = QuadrantSegmentation(records, SegmentationConfig(high_zone_size=4))
    with pytest.raises(ConfigurationError):
        segmentation.run()


def test_save_results(segmentation, tmp_path) -> None:
    paths = segmentation.save_results(str(tmp_path))

    assert set(paths) == {"classified", "distribution", "proximity"}
    for path in paths.values():
        assert os.path.exists(path)
    assert os.path.basename(paths["distribution"]) == "segment_distribution.csv"


def test_save_validation_report(tmp_path) -> None:
    report = ValidationReport(
        rejected=(ReportItem(3, "CUST-0002", "Loyalty value is empty", "Loyalty: "),),
        warnings=(),
    )
    paths = DataManager(str(tmp_path)).save_validation_report(report)

    with open(paths["rejected"]) as f:
        lines = f.read().splitlines()
    assert lines[0] == "row,id,reason,value"
    assert len(lines) == 2
    assert os.path.exists(paths["warnings"])


def test_data_loader_round_trip(records, tmp_path) -> None:
    records[0].excluded = True
    records[1].satisfaction = 3.5
    loader = DataLoader()

    path = loader.save_records(records, "customers", str(tmp_path))
    loaded = loader.load_records(path)

    assert [r.id for r in loaded] == [r.id for r in records]
    assert loaded[0].excluded is True
    assert loaded[1].satisfaction == 3.5
    assert loaded[2].loyalty == 5
    assert loaded[2].date_format is None


def test_data_loader_rows_keep_raw_text(tmp_path) -> None:
    path = tmp_path / "import.csv"
    path.write_text("ID,Satisfaction,Loyalty\n007, 4,NA\n")

    headers, rows = DataLoader().load_rows(str(path))

    assert headers == ["ID", "Satisfaction", "Loyalty"]
    assert rows == [{"ID": "007", "Satisfaction": "4", "Loyalty": "NA"}]


def test_data_loader_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        DataLoader().load_table(str(tmp_path / "absent.csv"))
