from brchpredict.predictors.base import BasePredictor, BHTPredictor, GlobalHistoryPredictor
from brchpredict.predictors.tournament import TournamentPredictor
from brchpredict.simulation.simulator import BranchSimulator


class FixedPredictor(BasePredictor):
    """Always predicts the same direction and counts its updates."""

    def __init__(self, taken):
        super().__init__("Fixed", {'taken': taken})
        self.taken = taken
        self.updates = 0

    def predict(self, addr):
        return self.taken

    def update(self, taken_actually, taken_predicted, addr):
        self.updates += 1

    def reset(self):
        self.updates = 0

    def get_hardware_cost(self):
        return {'total_bits': 0, 'total_bytes': 0, 'total_kb': 0.0}


def test_meta_starts_on_second_predictor():
    tournament = TournamentPredictor(FixedPredictor(True), FixedPredictor(False))
    assert tournament.selected == 1
    assert tournament.predict(0) is False


def test_meta_follows_the_predictor_that_was_right():
    p0, p1 = FixedPredictor(True), FixedPredictor(False)
    tournament = TournamentPredictor(p0, p1)

    # Only p0 right: fast exit from 2 to 0
    tournament.update(True, tournament.predict(0), 0)
    assert tournament.meta.value == 0
    assert tournament.predict(0) is True

    # Only p1 right, twice: 0 -> 1 -> 3
    tournament.update(False, tournament.predict(0), 0)
    assert tournament.meta.value == 1
    assert tournament.selected == 0

    tournament.update(False, tournament.predict(0), 0)
    assert tournament.meta.value == 3
    assert tournament.predict(0) is False

    # Both sub-predictors learn every outcome
    assert p0.updates == 3
    assert p1.updates == 3


def test_meta_unchanged_when_both_agree():
    tournament = TournamentPredictor(FixedPredictor(True), FixedPredictor(True))
    tournament.update(True, True, 0)
    assert tournament.meta.value == 2
    tournament.update(False, True, 0)
    assert tournament.meta.value == 2


def test_bimodal_against_gshare_on_alternation():
    tournament = TournamentPredictor(BHTPredictor(2), GlobalHistoryPredictor(1, 2))
    simulator = BranchSimulator(tournament)

    wrong = 0
    for i in range(1000):
        taken = i % 2 == 0
        prediction = simulator.process_branch(0, taken)
        wrong += prediction != taken

    # gshare is selected from the start and only misses once while training
    assert wrong == 1
    assert tournament.selected == 1


def test_reset_restores_meta_and_children():
    p0, p1 = FixedPredictor(True), FixedPredictor(False)
    tournament = TournamentPredictor(p0, p1)
    tournament.update(True, False, 0)
    tournament.reset()
    assert tournament.meta.value == 2
    assert p0.updates == 0


def test_hardware_cost_sums_children():
    tournament = TournamentPredictor(BHTPredictor(4), GlobalHistoryPredictor(4, 4))
    cost = tournament.get_hardware_cost()
    assert cost['total_bits'] == 16 * 2 + (16 * 2 + 4) + 2
    assert len(cost['sub_predictors']) == 2
