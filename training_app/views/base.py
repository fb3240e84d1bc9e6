from rest_framework import viewsets

from training_app.permissions import IsPlanner
from training_app.utils import envelope, parse_bool_param


class PlannerModelViewSet(viewsets.ModelViewSet):
    """
    Planner-only CRUD answering in the ``{code, message, data}`` envelope.

    Subclasses implement ``guarded_destroy(instance, force)`` returning the
    counts of what was removed.
    """
    permission_classes = [IsPlanner]

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return envelope(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return envelope(serializer.data, message="Created.")

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return envelope(serializer.data, message="Updated.")

    def destroy(self, request, *args, **kwargs):
        counts = self.guarded_destroy(self.get_object(), force=parse_bool_param(request.query_params, "force"))
        return envelope(counts, message="Deleted.")

    def guarded_destroy(self, instance, *, force):
        raise NotImplementedError
