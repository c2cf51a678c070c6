"""Tests for the CSV metrics report."""

import pytest

from cellsep.analysis.metrics import ChannelRecord, ImageRecord
from cellsep.utils.error_handler import ReportError
from cellsep.utils.export_utils import (
    ExportConfig,
    MetricsReportWriter,
    export_records_csv,
    report_header
)


def _record(name, count=1):
    channel = ChannelRecord(count, 10.0 * count, 0.5 * count, (count,) + (0,) * 10)
    return ImageRecord(name, {'Green': channel, 'Red': channel, 'White': channel})


def test_header_layout():
    header = report_header()

    assert len(header) == 1 + 3 * (3 + 11)
    assert header[:5] == [
        'Image_Name',
        'Green_Contour_Count',
        'Green_Contour_Diameter_(mean)',
        'Green_Contour_Aspect_Ratio_(mean)',
        '0 <= Green_Contour_Area < 40',
    ]
    assert header[14] == 'Green_Contour_Area >= 400'
    assert header[15] == 'Red_Contour_Count'
    assert header[-1] == 'White_Contour_Area >= 400'


def test_header_follows_bin_config():
    header = report_header(ExportConfig(bin_width=25, num_bins=3, channel_labels=('Green',)))
    assert header[4:] == [
        '0 <= Green_Contour_Area < 25',
        '25 <= Green_Contour_Area < 50',
        'Green_Contour_Area >= 50',
    ]


def test_export_records_csv():
    text = export_records_csv([_record('a.tif', 2), _record('b.tif', 0)])
    lines = text.strip().split('\n')

    assert len(lines) == 3
    assert lines[1].startswith('a.tif,2,20.000000,1.000000,2,0')
    assert lines[2].startswith('b.tif,0,0.000000,0.000000,0,0')


def test_writer_streams_rows(tmp_path):
    path = tmp_path / 'out' / 'computed_metrics.csv'
    with MetricsReportWriter(path) as writer:
        writer.write(_record('a.tif'))
        writer.write(_record('b.tif'))

    lines = path.read_text().strip().split('\n')
    assert lines[0].startswith('Image_Name,Green_Contour_Count')
    assert [line.split(',')[0] for line in lines[1:]] == ['a.tif', 'b.tif']
    assert writer.rows_written == 2


def test_writer_with_no_rows_leaves_header(tmp_path):
    path = tmp_path / 'computed_metrics.csv'
    with MetricsReportWriter(path):
        pass
    assert path.read_text().count('\n') == 1


def test_writer_rejects_mismatched_row(tmp_path):
    short = ImageRecord('a.tif', {'Green': ChannelRecord.empty(11)})
    with MetricsReportWriter(tmp_path / 'r.csv') as writer:
        with pytest.raises(ReportError):
            writer.write(short)


def test_write_before_open(tmp_path):
    with pytest.raises(ReportError):
        MetricsReportWriter(tmp_path / 'r.csv').write(_record('a.tif'))


def test_unwritable_report(tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('')
    with pytest.raises(ReportError):
        MetricsReportWriter(blocker / 'r.csv').open()
