import io

import numpy as np

from kmeans.cli import KMeansConfig, build_parser, main, run
from kmeans.datagen import generate_rows, write_rows


def _two_group_csv():
    lines = []
    for i in range(10):
        lines.append(f"row{i},{0.1 * i:.2f},{0.05 * i:.2f}")
    for i in range(10):
        lines.append(f"row{10 + i},{10 + 0.1 * i:.2f},{10 - 0.05 * i:.2f}")
    return "\n".join(lines) + "\n"


def test_config_from_args():
    args = build_parser().parse_args(["-k", "3", "-g", "-i", "-f", ";", "-n", ",", "1-3", "5"])
    config = KMeansConfig.from_args(args)
    assert config.k == 3
    assert config.generate_kernels
    assert config.ignore_header
    assert not config.fail_on_errors
    assert config.field_separator == ";"
    assert config.decimal_separator == ","
    assert config.columns == [1, 2, 3, 5]
    assert config.max_iter == 2500


def test_long_decimal_separator_warns(capsys):
    args = build_parser().parse_args(["-n", ",,", "0"])
    config = KMeansConfig.from_args(args)
    assert config.decimal_separator == ","
    assert "WARNING" in capsys.readouterr().err


def test_run_two_groups():
    out = io.StringIO()
    config = KMeansConfig(k=2, columns=[1, 2], generate_kernels=True)
    status = run(config, stdin=io.StringIO(_two_group_csv()), stdout=out)
    assert status == 0
    labels = out.getvalue().split()
    assert len(labels) == 20
    assert len(set(labels[:10])) == 1
    assert len(set(labels[10:])) == 1
    assert labels[0] != labels[10]


def test_run_with_header():
    out = io.StringIO()
    config = KMeansConfig(k=2, columns=[1, 2], ignore_header=True, seed=3)
    status = run(config, stdin=io.StringIO("name,a,b\n" + _two_group_csv()), stdout=out)
    assert status == 0
    lines = out.getvalue().splitlines()
    assert lines[0] == "kernel"
    assert len(lines) == 21


def test_run_reports_precondition(capsys):
    config = KMeansConfig(k=5, columns=[0])
    status = run(config, stdin=io.StringIO("1\n2\n3\n"), stdout=io.StringIO())
    assert status == 1
    assert "precondition" in capsys.readouterr().err


def test_run_reports_parse_error(capsys):
    config = KMeansConfig(k=1, columns=[0], fail_on_errors=True)
    status = run(config, stdin=io.StringIO("1\nbad\n"), stdout=io.StringIO())
    assert status == 1
    assert "parse" in capsys.readouterr().err


def test_run_empty_input(capsys):
    status = run(KMeansConfig(columns=[0]), stdin=io.StringIO(""), stdout=io.StringIO())
    assert status == 1


def test_main_with_generated_file(tmp_path, capsys):
    path = tmp_path / "data.csv"
    with open(path, "w") as f:
        write_rows(generate_rows(40, 3, random_state=1), f)
    status = main(["-k", "4", "--seed", "2", "--input", str(path), "0-2"])
    assert status == 0
    labels = [int(v) for v in capsys.readouterr().out.split()]
    assert len(labels) == 40
    assert all(0 <= label < 4 for label in labels)


def test_generate_rows():
    rows = generate_rows(100, 4, random_state=5)
    assert rows.shape == (100, 4)
    assert np.all(rows >= 0.0) and np.all(rows < 10.0)
    assert np.array_equal(rows, generate_rows(100, 4, random_state=5))


def test_write_rows():
    out = io.StringIO()
    write_rows(np.array([[1.0, 2.5], [0.125, 3.0]]), out)
    assert out.getvalue() == "1.000000,2.500000\n0.125000,3.000000\n"


def test_run_invalid_utf8_in_unselected_column():
    raw = b"1,2,x\n3,4,\xff\xfe\n10,11,y\n12,13,z\n"
    stdin = io.TextIOWrapper(io.BytesIO(raw), errors="replace")
    out = io.StringIO()
    status = run(KMeansConfig(k=2, columns=[0, 1], seed=1), stdin=stdin, stdout=out)
    assert status == 0
    assert len(out.getvalue().split()) == 4


def test_run_invalid_utf8_in_selected_column(capsys):
    raw = b"1,2\n3,4\n5,\xff\n10,11\n"
    out = io.StringIO()
    status = run(KMeansConfig(k=2, columns=[0, 1], seed=1),
                 stdin=io.TextIOWrapper(io.BytesIO(raw), errors="replace"), stdout=out)
    assert status == 0
    assert len(out.getvalue().split()) == 3

    status = run(KMeansConfig(k=2, columns=[0, 1], fail_on_errors=True),
                 stdin=io.TextIOWrapper(io.BytesIO(raw), errors="replace"), stdout=io.StringIO())
    assert status == 1
    assert "parse" in capsys.readouterr().err


def test_run_strict_stream_decode_error(capsys):
    stdin = io.TextIOWrapper(io.BytesIO(b"1,2\n3,4,\xff\n"))
    status = run(KMeansConfig(k=1, columns=[0, 1]), stdin=stdin, stdout=io.StringIO())
    assert status == 1
    assert "Could not read input" in capsys.readouterr().err


def test_main_input_file_with_invalid_utf8(tmp_path, capsys):
    path = tmp_path / "data.csv"
    path.write_bytes(b"1,2,a\n3,4,\xff\n10,11,b\n12,13,c\n")
    status = main(["-k", "2", "--seed", "1", "--input", str(path), "0-1"])
    assert status == 0
    assert len(capsys.readouterr().out.split()) == 4
