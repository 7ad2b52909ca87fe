"""Protogen field code generator."""

from .descriptors import DescriptorError as DescriptorError
from .descriptors import EnumDescriptor as EnumDescriptor
from .descriptors import EnumValueDescriptor as EnumValueDescriptor
from .descriptors import FieldDescriptor as FieldDescriptor
from .descriptors import FileDescriptor as FileDescriptor
from .descriptors import MessageDescriptor as MessageDescriptor
from .descriptors import build_descriptors as build_descriptors
from .descriptors import load_schema as load_schema
from .fields import *
from .options import INVARIANT as INVARIANT
from .options import FormatPolicy as FormatPolicy
from .options import GeneratorOptions as GeneratorOptions
from .sizes import VARIABLE_SIZE as VARIABLE_SIZE
from .types import *
