import logging

import numpy as np

from ftwt.log import setup_logging
from ftwt.main import MODES, main
from ftwt.problems import PROBLEMS

SMALL_DATASET = [
    "--classes", "3",
    "--input-size", "12",
    "--train-per-class", "6",
    "--test-per-class", "2",
    "--seed", "3",
]


def test_list_mode(capsys) -> None:
    main(["--mode", "list"])
    out = capsys.readouterr().out

    assert "simple_cross:" in out
    assert "sweep:" in out


def test_simple_cross_mode(capsys) -> None:
    main(["--mode", "simple_cross", "--iterations", "10"])
    out = capsys.readouterr().out

    assert "Compressed Matrix - Simple 2x2 Net:" in out
    assert "[simple_cross] crossed: True" in out


def test_train_mode_records_statistics(tmp_path, capsys) -> None:
    record = tmp_path / "train.npz"
    main(["--mode", "train", "--iterations", "2", "--batch-size", "4", "--extra-verts", "5", "--record", str(record)] + SMALL_DATASET)
    out = capsys.readouterr().out

    assert "accuracy=" in out
    assert record.exists()
    with np.load(record) as data:
        # 18 training samples in batches of 4 make 5 steps per pass
        assert data["steps"].tolist() == list(range(1, 11))


def test_sweep_mode(tmp_path, capsys) -> None:
    log_file = tmp_path / "sweep.log"
    main(
        [
            "--mode", "sweep",
            "--workers", "2",
            "--sweep-iterations", "1",
            "--sweep-batch-sizes", "4",
            "--sweep-edge-probs", "0.5",
            "--sweep-learn-rates", "0.1", "0.01",
            "--log-file", str(log_file),
        ]
        + SMALL_DATASET
    )
    out = capsys.readouterr().out

    assert "Number of jobs = 2" in out
    assert out.count("accuracy") == 2
    assert "sweep-worker" in log_file.read_text()


def test_feedforward_mode(capsys) -> None:
    main(["--mode", "feedforward", "--iterations", "3", "--batch-size", "4", "--learn-rate", "1.0"] + SMALL_DATASET)
    out = capsys.readouterr().out

    assert "[feedforward] synapses=36" in out
    assert "accuracy=" in out


def test_every_problem_has_a_mode() -> None:
    assert set(PROBLEMS) <= set(MODES)


def test_setup_logging_closes_replaced_handlers(tmp_path) -> None:
    setup_logging("INFO", str(tmp_path / "first.log"))
    logger = logging.getLogger("ftwt")
    first = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    setup_logging("INFO", str(tmp_path / "second.log"))

    assert len(first) == 1
    assert first[0].stream is None
    assert first[0] not in logger.handlers
    assert len(logger.handlers) == 2
