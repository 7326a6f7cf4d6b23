import csv

import pytest

import experiments as exp


@pytest.mark.parametrize("name", sorted(exp.GENERATOR_REGISTRY))
def test_generators_fill_the_image(name):
	dataset_name, data = exp.generate_image(name, 9, 5, seed=1)
	assert dataset_name == name
	assert len(data) == 45


def test_unknown_generator_falls_back():
	dataset_name, data = exp.generate_image("bogus", 4, 4, seed=1)
	assert dataset_name == "bogus_fallback_noise256"
	assert len(data) == 16


def test_entropy():
	assert exp.shannon_entropy({}) == 0.0
	assert exp.shannon_entropy({1: 10}) == 0.0
	assert exp.shannon_entropy({1: 5, 2: 5}) == 1.0


@pytest.mark.parametrize("container", exp.CONTAINERS)
def test_run_one_is_lossless(container):
	_, data = exp.generate_image("zipf64", 32, 16, seed=4)
	row = exp.run_one(data, 32, 16, container)
	assert row.correctness_ok == 1
	assert row.container == container
	assert row.bits_per_sample >= row.entropy_bits
	assert row.bits_per_sample < row.entropy_bits + 1


def test_standalone_container_is_larger():
	_, data = exp.generate_image("noise16", 16, 16, seed=2)
	closed = exp.run_one(data, 16, 16, "closed")
	standalone = exp.run_one(data, 16, 16, "standalone")
	assert standalone.compressed_bytes > closed.compressed_bytes
	assert standalone.bit_count == closed.bit_count


def test_run_one_rejects_unknown_container():
	with pytest.raises(ValueError):
		exp.run_one(b"\x00", 1, 1, "zip")


def test_csv_outputs(tmp_path):
	rows = []
	for run_id in (1, 2):
		row = exp.run_one(exp.gen_gradient(8, 8), 8, 8, "closed")
		row.exp_name = "exp1_distribution"
		row.dataset_name = "gradient"
		row.run_id = run_id
		rows.append(row)

	exp.write_csv(tmp_path / "metrics.csv", rows)
	exp.group_summary(rows, tmp_path / "summary.csv")

	with (tmp_path / "metrics.csv").open(newline="", encoding="utf-8") as f:
		assert len(list(csv.DictReader(f))) == 2
	with (tmp_path / "summary.csv").open(newline="", encoding="utf-8") as f:
		summary = list(csv.DictReader(f))
	assert len(summary) == 1
	assert summary[0]["n_runs"] == "2"
	assert float(summary[0]["correctness_ok_rate"]) == 1.0


def test_main_writes_reports_and_charts(tmp_path, capsys):
	outdir = tmp_path / "results"
	code = exp.main([
		"--outdir", str(outdir), "--runs", "1",
		"--exp1_side", "8", "--exp1_generators", "flat,gradient",
		"--exp2_min_side", "4", "--exp2_max_side", "8", "--exp2_generators", "noise16",
	])
	assert code == 0
	assert (outdir / "metrics.csv").exists()
	assert (outdir / "summary.csv").exists()
	assert (outdir / "exp1_compression_ratio.png").exists()
	assert (outdir / "exp2_time_noise16.png").exists()
	assert "Correctness rate across all runs: 1.000" in capsys.readouterr().out
