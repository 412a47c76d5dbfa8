"""Template expansion for data-bound lists."""

from dataclasses import dataclass

from ..core import get_logger
from ..errors import BindingError
from ..protocol.components import Template
from .data_model import DataModelStore
from .resolver import ROOT_SCOPE, Scope

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChildInstance:
    """A child to render: a component definition plus the scope it binds in."""

    component_id: str
    scope: Scope = ROOT_SCOPE

    @property
    def instance_id(self) -> str:
        return self.scope.instance_id(self.component_id)


class TemplateExpander:
    """
    Materializes template children from the bound array.

    Expansion is computed from the current array on every call, so resizing
    the array never leaves stale instances behind.
    """

    def __init__(self, store: DataModelStore) -> None:
        self.store = store

    def expand(
        self, template: Template, scope: Scope = ROOT_SCOPE, owner_id: str | None = None
    ) -> list[ChildInstance]:
        """
        One instance of the template component per array element, in array order.

        Relative paths inside instance ``i`` resolve under ``<dataBinding>/i``.

        Raises:
            BindingError: Binding is absent or not an array
        """
        array_path = scope.apply(template.data_binding)
        items = self.store.get(array_path)

        if items is None:
            raise BindingError(
                f"Template binding {array_path!r} has no data",
                component_id=owner_id,
                path=array_path,
            )
        if not isinstance(items, list):
            raise BindingError(
                f"Template binding {array_path!r} is a {type(items).__name__}, not an array",
                component_id=owner_id,
                path=array_path,
            )

        logger.debug(
            "template_expanded",
            owner=owner_id,
            template=template.component_id,
            path=array_path,
            count=len(items),
        )
        return [
            ChildInstance(template.component_id, scope.child(array_path, index))
            for index in range(len(items))
        ]
