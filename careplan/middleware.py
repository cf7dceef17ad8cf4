from django.http import JsonResponse

from .exceptions import BaseAppException


class ExceptionHandlerMiddleware:
    """
    Renders care-plan errors raised by the service layer as JSON.

    Unknown plans, goals, interventions, barriers and reviews come back as 404,
    refused state changes (achieved goal, resolved barrier, conducted review)
    as 409, an unauthorized principal as 403 and malformed input as 400. The
    body always carries `type`, `code`, `message` and, for domain errors, the
    numeric `error_code`.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, BaseAppException):
            return JsonResponse(
                exception.to_dict(),
                status=exception.http_status,
            )

        # Anything else is a server fault; Django renders the 500.
        return None
