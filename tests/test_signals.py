import pytest

from canbridge.decoding.signals import decode_signal, decode_distance, DecodedSignal


@pytest.mark.parametrize("data", [(), (0,), (1,), (7,)])
def test_short_payload_has_zero_distance(data):
    signal = decode_signal("Pedestrian", data)

    assert signal.distance_meters == 0.0
    assert signal.status == (len(data) > 0 and data[0] == 1)


def test_two_bytes_still_zero_distance():
    assert decode_signal("Pedestrian", (1, 200)).distance_meters == 0.0


@pytest.mark.parametrize("algorithm_id", ["Pedestrian", "BlindSpotDetection", "Unknown"])
def test_distance_is_little_endian_centimeters(algorithm_id):
    data = (0, 0x34, 0x12, 9)
    signal = decode_signal(algorithm_id, data)

    assert signal.distance_meters == 0x1234 / 100.0


def test_max_distance():
    assert decode_distance((0, 255, 255)) == 65535 / 100.0


def test_status_only_for_exact_one():
    assert decode_signal("X", (1, 0, 0)).status is True
    assert decode_signal("X", (2, 0, 0)).status is False
    assert decode_signal("X", (0, 0, 0)).status is False


def test_blind_spot_right_side():
    signal = decode_signal("BlindSpotDetection", (1, 50, 2, 1))

    assert signal == DecodedSignal(status=True, distance_meters=5.62, side="Direita")


@pytest.mark.parametrize("data", [(), (1,), (1, 50, 2), (1, 50, 2, 0), (1, 50, 2, 2)])
def test_blind_spot_defaults_to_left(data):
    assert decode_signal("BlindSpotDetection", data).side == "Esquerda"


def test_side_only_for_blind_spot():
    assert decode_signal("Pedestrian", (1, 50, 2, 1)).side is None

