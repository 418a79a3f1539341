from conftest import FakeResponse, candidate_body

from tutor.core.simulator import SimulationResult, Simulator, parse_prediction, static_warnings


def test_parse_prediction_reads_files_and_destructiveness() -> None:
    result = SimulationResult()
    parse_prediction(
        "FILES_AFFECTED: a.txt, logs/, none\nEXPECTED_OUTPUT: nothing\nDESTRUCTIVENESS: high",
        result,
    )
    assert result.files_affected == ["a.txt", "logs/"]
    assert result.is_destructive


def test_static_warnings() -> None:
    assert len(static_warnings("rm -r build/*")) == 2
    assert static_warnings("chmod 777 file") == ["chmod 777 removes every permission restriction from the file."]
    assert static_warnings("ls") == []


def test_simulate_combines_rules_and_prediction(make_client) -> None:
    reply = "FILES_AFFECTED: /\nEXPECTED_OUTPUT: nothing\nRISKS: total loss\nDESTRUCTIVENESS: HIGH"
    client, http = make_client(FakeResponse(200, candidate_body(reply)))

    result = Simulator(client).simulate("rm -rf /", context="in a container")

    assert result.is_destructive
    assert result.warnings[0] == "WARNING: this command is potentially destructive!"
    assert result.files_affected == ["/"]
    assert result.predicted_output == reply
    assert "Context: in a container" in http.last_contents[0]["parts"][0]["text"]


def test_simulate_reports_service_failure(make_client, connection_error) -> None:
    client, _ = make_client(connection_error)

    result = Simulator(client).simulate("ls")

    assert not result.is_destructive
    assert result.predicted_output.startswith("Error simulating command: Network error:")
