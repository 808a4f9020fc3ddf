# tests/test_manage.py
from crypto_dashboard.manage import main


def test_add_and_list_users(capsys):
    assert main(["add-user", "--email", "admin@x.com", "--name", "Admin", "--password", "pw"]) == 0
    assert "User created successfully" in capsys.readouterr().out

    assert main(["list-users"]) == 0
    out = capsys.readouterr().out
    assert "Found 1 user(s)" in out
    assert "admin@x.com" in out

def test_add_user_duplicate_fails(capsys):
    main(["add-user", "--email", "admin@x.com", "--name", "Admin", "--password", "pw"])
    assert main(["add-user", "--email", "admin@x.com", "--name", "Admin", "--password", "pw"]) == 1
    assert "User already exists" in capsys.readouterr().err

def test_add_user_prompts_for_password(mocker, capsys):
    prompt = mocker.patch("crypto_dashboard.manage.getpass.getpass", return_value="secret")
    assert main(["add-user", "--email", "b@x.com", "--name", "B"]) == 0
    prompt.assert_called_once()

def test_list_users_empty(capsys):
    assert main(["list-users"]) == 0
    assert "No users found" in capsys.readouterr().out

def test_serve_runs_uvicorn(mocker):
    run = mocker.patch("uvicorn.run")
    assert main(["serve", "--port", "8123"]) == 0
    assert run.call_args.args[0] == "crypto_dashboard.main:app"
    assert run.call_args.kwargs["port"] == 8123
