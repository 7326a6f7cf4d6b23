import random

import compress_pgm
from pgm import read_pgm, write_pgm


def make_image(path, width=16, height=9, seed=0):
	rng = random.Random(seed)
	samples = bytes(rng.choice([0, 0, 0, 64, 128, 255]) for _ in range(width * height))
	write_pgm(path, samples, width, height)
	return samples


def test_roundtrip_command(tmp_path, capsys):
	src = tmp_path / "img.pgm"
	samples = make_image(src)

	assert compress_pgm.main(["roundtrip", str(src)]) == 0

	out = capsys.readouterr().out
	assert "Original size:" in out
	assert "Compressed size:" in out
	assert "Compression ratio:" in out
	assert "identical" in out
	assert (tmp_path / "img.pgm.huff").exists()
	assert read_pgm(tmp_path / "decompressed_img.pgm").samples == samples


def test_roundtrip_standalone_with_explicit_paths(tmp_path):
	src = tmp_path / "img.pgm"
	samples = make_image(src, seed=3)
	huff_path = tmp_path / "out.huff"
	restored = tmp_path / "restored.pgm"

	assert compress_pgm.main(["roundtrip", str(src), "--output", str(huff_path),
	                          "--decompressed", str(restored), "--standalone"]) == 0
	assert huff_path.read_bytes().startswith(b"HUF1")
	assert read_pgm(restored).samples == samples


def test_compress_then_decompress_standalone(tmp_path):
	src = tmp_path / "img.pgm"
	samples = make_image(src, 20, 20, seed=5)
	huff_path = tmp_path / "img.huff"
	restored = tmp_path / "back.pgm"

	assert compress_pgm.main(["compress", str(src), "--output", str(huff_path), "--standalone"]) == 0
	assert compress_pgm.main(["decompress", str(huff_path), str(restored), "--standalone"]) == 0
	image = read_pgm(restored)
	assert (image.samples, image.width, image.height) == (samples, 20, 20)


def test_closed_loop_decompress_needs_reference(tmp_path, capsys):
	src = tmp_path / "img.pgm"
	samples = make_image(src, seed=8)
	huff_path = tmp_path / "img.huff"
	restored = tmp_path / "back.pgm"

	assert compress_pgm.main(["compress", str(src), "--output", str(huff_path)]) == 0
	assert compress_pgm.main(["decompress", str(huff_path), str(restored)]) == 2
	assert "--reference" in capsys.readouterr().err

	assert compress_pgm.main(["decompress", str(huff_path), str(restored), "--reference", str(src)]) == 0
	assert read_pgm(restored).samples == samples


def test_missing_input_reports_error(tmp_path, capsys):
	assert compress_pgm.main(["compress", str(tmp_path / "nothing.pgm")]) == 2
	assert "error:" in capsys.readouterr().err


def test_corrupt_container_reports_error(tmp_path, capsys):
	src = tmp_path / "img.pgm"
	write_pgm(src, bytes([2, 2, 0, 1]), 2, 2)
	huff_path = tmp_path / "img.huff"
	assert compress_pgm.main(["compress", str(src), "--output", str(huff_path)]) == 0

	blob = huff_path.read_bytes()
	huff_path.write_bytes(blob[:-1] + bytes([0b00000100]))
	assert compress_pgm.main(["decompress", str(huff_path), str(tmp_path / "x.pgm"), "--reference", str(src)]) == 2
	assert "middle of a code" in capsys.readouterr().err


def test_unwritable_output_reports_error(tmp_path, capsys):
	src = tmp_path / "img.pgm"
	make_image(src)
	target = tmp_path / "no_such_dir" / "img.huff"
	assert compress_pgm.main(["compress", str(src), "--output", str(target)]) == 2
	assert "error:" in capsys.readouterr().err


def test_unwritable_decompressed_image_reports_error(tmp_path, capsys):
	src = tmp_path / "img.pgm"
	make_image(src, seed=11)
	huff_path = tmp_path / "img.huff"
	assert compress_pgm.main(["compress", str(src), "--output", str(huff_path), "--standalone"]) == 0
	target = tmp_path / "missing" / "back.pgm"
	assert compress_pgm.main(["decompress", str(huff_path), str(target), "--standalone"]) == 2
	assert "error:" in capsys.readouterr().err
