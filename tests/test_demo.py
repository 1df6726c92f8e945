"""
Smoke tests for the walkthrough demo.
"""

from mlsumcheck.config import create_toy_config
from mlsumcheck.demo import build_demo_circuit, demo_gkr, demo_worked_example, main, round_table
from mlsumcheck.mle import MultilinearExtension
from mlsumcheck.protocol import SumCheckProver, run_sumcheck


def test_main_quiet(capsys):
    assert main(["--quiet"]) == 0
    out = capsys.readouterr().out
    assert "DEMOS COMPLETE" in out
    assert "g(X) = f(10, X, ·)  = 12 + 16X" in out


def test_main_verbose_goldilocks(capsys):
    assert main(["--field", "goldilocks", "--workers", "2"]) == 0
    out = capsys.readouterr().out
    assert "ROUND 1" in out
    assert "GKR proof accepted" in out


def test_round_table(worked_mle):
    result = run_sumcheck(SumCheckProver(worked_mle, create_toy_config(verbose=False)))
    table = round_table(result)
    assert "g_i(X)" in table
    assert "30 + X" in table
    assert len(table.splitlines()) == 2 + 3


def test_individual_demos(capsys):
    config = create_toy_config(verbose=False)
    assert demo_worked_example(config)
    assert demo_gkr(config)
    assert [v.value for v in build_demo_circuit(config).evaluate([1, 2, 3, 4])[0]] == [9, 36]
    assert "Basis X_(0,0,1,1)" in capsys.readouterr().out
