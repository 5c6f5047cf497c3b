"""FastAPI adapter: serve commands as HTTP endpoints."""

from cmdispatch.web.app import add_command_routes, create_app
from cmdispatch.web.body import (
    RequestBodyArgConverter,
    RequestBodyAsArg,
    json_body_fields_as_vars,
    map_json_body_fields_as_vars,
    request_body_as_arg,
)
from cmdispatch.web.errors import ErrorHandler, ErrorHandlerFunc, LogErrors, default_error_handler, handle_error
from cmdispatch.web.handlers import (
    command_endpoint,
    command_endpoint_request_body_arg,
    command_endpoint_with_query_params,
    dispatcher_endpoint,
)
from cmdispatch.web.writers import (
    RespondHTML,
    RespondJSON,
    RespondPlaintext,
    ResultsWriter,
    ResultsWriterFunc,
    respond_content_type,
)
