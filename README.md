# prreviewer

Building blocks for a service that assigns reviewers to pull requests inside
development teams:

- a domain model of teams, users and pull requests with strict validation of
  identifiers and names (`prreviewer.team`, `prreviewer.user`,
  `prreviewer.pull_request`, `prreviewer.validators`, `prreviewer.errors`);
- abstract ports for storage, logging and transactions (`prreviewer.ports`);
- request validation and JSON response helpers for the HTTP API
  (`prreviewer.request_validation`, `prreviewer.presenter`);
- WSGI middleware, HTTP handlers, a router and a server built on Werkzeug
  (`prreviewer.middleware`, `prreviewer.*_handler`, `prreviewer.router`,
  `prreviewer.server`).

## Domain model

```python
from prreviewer.pull_request import PullRequest, PRStatus
from prreviewer.errors import AuthorCannotReviewError, PRMergedError

pr = PullRequest.create("pr-1001", "Add user authentication", "user-123")

pr.add_reviewer("alice")
pr.add_reviewer("bob")
pr.replace_reviewer("alice", "charlie")
assert pr.assigned_reviewers == ["charlie", "bob"]

try:
    pr.add_reviewer("user-123")
except AuthorCannotReviewError:
    pass  # the author never reviews their own pull request

assert pr.merge() is True    # first merge changes the state
assert pr.merge() is False   # merging again is a no-op
assert pr.status is PRStatus.MERGED and pr.merged_at is not None

try:
    pr.remove_reviewer("bob")
except PRMergedError:
    pass  # reviewers of a merged pull request are frozen
```

A pull request holds at most two reviewers; a third raises
`TooManyReviewersError`. `assigned_reviewers` returns a copy of the list.
Identifiers and team names are trimmed and may contain only ASCII letters,
digits, `-` and `_` (ids up to 255 bytes, team names up to 100). User names
(up to 100 bytes) and pull request names (up to 200 bytes) may also contain
spaces and any Unicode letters or digits.

```python
from prreviewer.team import Team
from prreviewer.user import User

team = Team.create("  backend-team  ")   # stored as "backend-team"

user = User.create("u1", "John Doe", "backend-team")
user.deactivate()                         # True the first time, False after
user.change_team("frontend")              # NoChangeError if the team is the same
user.change_username("Jane Doe")
```

Calling the class directly (`Team(...)`, `User(...)`, `PullRequest(...)`)
restores a stored entity without validation. Entities compare equal by their
id (by name for teams).

Every domain failure is a subclass of `prreviewer.errors.DomainError`:
`InvalidIDError`, `InvalidUsernameError`, `InvalidTeamNameError`,
`InvalidPRNameError`, `NoChangeError`, `PRMergedError`,
`AuthorCannotReviewError`, `ReviewerAlreadyAssignedError`,
`ReviewerNotAssignedError` and `TooManyReviewersError`.

## HTTP API

The handlers take service objects that you provide; their expected methods are
described by the protocols `TeamService`, `UserService`,
`PullRequestService` and `StatisticsService`. `Router` wires the handlers
into one WSGI application:

```python
from prreviewer.router import Router
from prreviewer.server import Server
from prreviewer.team_handler import TeamHandler
from prreviewer.user_handler import UserHandler
from prreviewer.pull_request_handler import PullRequestHandler
from prreviewer.statistics_handler import StatisticsHandler

router = Router(
    TeamHandler(team_service),
    UserHandler(user_service),
    PullRequestHandler(pr_service),
    StatisticsHandler(stats_service),
    logger,                 # any object implementing prreviewer.ports.Logger
    max_body_size=1 << 20,
)
app = router.setup()

server = Server(app, host="127.0.0.1", port=8080, read_timeout=10)
server.start()              # blocks; call server.shutdown(timeout) from another thread
```

`setup()` wraps the routes in request-id handling (the `X-Request-ID`
header is echoed, or generated when missing; see
`prreviewer.middleware.current_request_id`), a body size limit, request
logging, recovery of unhandled exceptions as a JSON 500 response, real-IP
detection from proxy headers and no-cache headers.

| Method     | Path                        |
|------------|-----------------------------|
| GET, HEAD  | `/health`                   |
| POST       | `/team/add`                 |
| GET        | `/team/get?team_name=`      |
| POST       | `/team/deactivateMembers`   |
| POST       | `/users/setIsActive`        |
| GET        | `/users/getReview?user_id=` |
| POST       | `/pullRequest/create`       |
| POST       | `/pullRequest/merge`        |
| POST       | `/pullRequest/reassign`     |
| GET        | `/statistics?team_name=`    |

Errors are returned as

```json
{"error": {"code": "NOT_FOUND", "message": "team not found"}}
```

with codes from `prreviewer.presenter.ErrorCode`: `TEAM_EXISTS`,
`PR_EXISTS`, `PR_MERGED`, `NOT_ASSIGNED`, `NO_CANDIDATE`, `NOT_FOUND`,
`INVALID_REQUEST` and `INTERNAL_ERROR`. Services report failures by raising
the exceptions in `prreviewer.service_errors`; `map_service_error` turns
them into a status code, an error code and a message, and anything else
becomes a 500 `INTERNAL_ERROR`.

## What is not included

The package contains no implementation of the application services (team
creation, reviewer selection, merging, statistics), no storage behind the
repository protocols, no logger or transaction manager implementation, no
configuration loading and no command that starts the service. To run it you
supply those yourself and pass them to the handlers and `Router` as shown
above.