"""
 * Copyright(c) 2021 to 2022 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause
"""

# typing_extensions tracks the annotation semantics of the newest Python
# (lazy class annotations included), so member discovery reads the same
# on every supported interpreter.
from typing_extensions import Annotated, get_origin, get_args, get_type_hints, get_annotations  # noqa F401


__all__ = ["Annotated", "get_origin", "get_args", "get_type_hints", "get_annotations"]
