import json

import pytest

from canbridge.decoding.frames import CanFrame, FrameShape, parse_frame
from canbridge.errors import DecodeError, BridgeError


def test_parse_production_shape():
    payload = json.dumps({
        "AlgorithmID": "BlindSpotDetection",
        "CAN_Message": {"ArbitrationId": 256, "Data": [1, 50, 2, 1]},
    })

    frame = parse_frame(payload, FrameShape.PRODUCTION)

    assert frame == CanFrame("BlindSpotDetection", 256, (1, 50, 2, 1))


def test_parse_simulation_shape_from_bytes():
    payload = b'{"algorithm_id":"Pedestrian","can_message":{"arbitration_id":257,"data":[0,10,0]}}'

    frame = parse_frame(payload, FrameShape.SIMULATION)

    assert frame.algorithm_id == "Pedestrian"
    assert frame.arbitration_id == 257
    assert frame.data == (0, 10, 0)


def test_shapes_do_not_mix():
    payload = '{"AlgorithmID":"Pedestrian","CAN_Message":{"ArbitrationId":257,"Data":[1]}}'

    frame = parse_frame(payload, FrameShape.SIMULATION)

    assert frame == CanFrame()


@pytest.mark.parametrize("payload", ['{}', '{"AlgorithmID": ""}', '{"AlgorithmID": null}'])
def test_missing_keys_use_defaults(payload):
    frame = parse_frame(payload, FrameShape.PRODUCTION)

    assert frame.algorithm_id == "Unknown"
    assert frame.arbitration_id == 0
    assert frame.data == ()


def test_non_array_data_is_empty():
    payload = '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":3,"Data":"0102"}}'

    frame = parse_frame(payload, FrameShape.PRODUCTION)

    assert frame.arbitration_id == 3
    assert frame.data == ()


@pytest.mark.parametrize("payload", ['not json', '{"AlgorithmID":', '', '[1, 2, 3]', b'\xff\xfe'])
def test_malformed_payload_raises_decode_error(payload):
    with pytest.raises(DecodeError):
        parse_frame(payload, FrameShape.PRODUCTION)


def test_decode_error_is_bridge_error():
    assert issubclass(DecodeError, BridgeError)


def test_describe_shows_hex_id_and_bytes():
    frame = CanFrame("X", 0x101, (0, 10, 0))
    assert frame.describe() == "Arbitration ID: 0x101 | Data Bytes: 0 10 0"


@pytest.mark.parametrize("payload", [
    '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[1,Infinity,0]}}',
    '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[1,-Infinity,0]}}',
    '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[NaN]}}',
    '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":Infinity,"Data":[1]}}',
    '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[1e400]}}',
])
def test_non_finite_numbers_raise_decode_error(payload):
    with pytest.raises(DecodeError):
        parse_frame(payload, FrameShape.PRODUCTION)


def test_deeply_nested_payload_raises_decode_error():
    payload = "[" * 100000 + "]" * 100000

    with pytest.raises(DecodeError):
        parse_frame(payload, FrameShape.PRODUCTION)


@pytest.mark.parametrize("byte", ['-1', '256', '300', 'true', 'false', '"7"', '1.5', 'null', '[1]'])
def test_invalid_data_byte_raises_decode_error(byte):
    payload = '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[1,%s,0]}}' % byte

    with pytest.raises(DecodeError):
        parse_frame(payload, FrameShape.PRODUCTION)


def test_data_bytes_at_range_limits():
    payload = '{"AlgorithmID":"X","CAN_Message":{"ArbitrationId":256,"Data":[0,255,255]}}'

    assert parse_frame(payload, FrameShape.PRODUCTION).data == (0, 255, 255)


@pytest.mark.parametrize("arbitration_id", ['-1', 'true', '"256"', '2.5', '{}'])
def test_invalid_arbitration_id_raises_decode_error(arbitration_id):
    payload = '{"algorithm_id":"X","can_message":{"arbitration_id":%s,"data":[1]}}' % arbitration_id

    with pytest.raises(DecodeError):
        parse_frame(payload, FrameShape.SIMULATION)


def test_null_arbitration_id_defaults_to_zero():
    payload = '{"algorithm_id":"X","can_message":{"arbitration_id":null,"data":[1]}}'

    assert parse_frame(payload, FrameShape.SIMULATION).arbitration_id == 0
