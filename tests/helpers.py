"""Helpers for building small single page application trees on disk."""

from pathlib import Path
from typing import Dict


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Write ``files`` (relative path -> content) under ``root``."""
    for relative_path, content in files.items():
        target = root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


BASE_URL_JS = """\
export const isProd = () => {
  return process.env.NODE_ENV === 'production'
}

export const BASE_URL = () => {
  return process.env.NODE_ENV === 'production' ? '/prod-api' : '/dev-api'
}

export const API_URL = () => {
  return BASE_URL()
}

export const UPLOAD_PATH = '/upload'
"""

USER_API_JS = """\
import request from '@/utils/request'
import { API_URL } from '@/api/baseUrl'

const PREFIX = '/user'

/**
 * Fetch user list
 */
export function getUserList(params) {
  return request({
    url: API_URL() + PREFIX + '/list',
    method: 'get',
    params
  })
}

// Fetch one user
export const getUser = (id) => request({ url: `${PREFIX}/detail`, method: 'post' })
"""

ORDER_API_JS = """\
import request from '@/utils/request'

export function listOrders() {
  return request({ url: ORDER_BASE + '/orders', method: 'get' })
}
"""

ROUTER_JS = """\
import Vue from 'vue'
import Router from 'vue-router'

const homeRoutes = [
  {
    path: '/home',
    name: 'home',
    component: _import('/home/index'),
  },
  {
    path: '/user',
    name: 'user',
    component: () => import('@/views/user/index.vue'),
    children: [
      { path: 'detail', name: 'userDetail', component: _import('/user/detail') },
    ]
  },
  // backing file intentionally absent
  { path: '/ghost', name: 'ghost', component: _import('/ghost/index') },
  { path: '/redirect', redirect: '/home' }
]

export default new Router({
  routes: [
    ...homeRoutes,
    { path: '/orders', name: 'orders', component: _import('/orders/list') }
  ]
})
"""

HOME_VUE = """\
<template><div><user-card /></div></template>
<script>
import { getUserList } from '@/api/user'
import UserCard from './components/UserCard.vue'

export default {
  components: { UserCard },
  methods: {
    open() {
      this.$router.push({ name: 'orders' })
    }
  }
}
</script>
"""

USER_CARD_VUE = """\
<script>
import { getUser as fetchUser } from '@/api/user'
export default {}
</script>
"""

USER_INDEX_VUE = """\
<script>
import { getUserList } from '../../api/user'
export default {
  methods: {
    detail() { this.$router.push('/user/detail') }
  }
}
</script>
"""

USER_DETAIL_VUE = """\
<script>
import * as userApi from '@/api/user'
export default {
  created() { userApi.getUser(1) }
}
</script>
"""

ORDERS_VUE = """\
<script>
import { listOrders } from '@/api/order'
export default {}
</script>
"""

SAMPLE_FILES = {
    "src/api/baseUrl.js": BASE_URL_JS,
    "src/api/user.js": USER_API_JS,
    "src/api/order.js": ORDER_API_JS,
    "src/router/index.js": ROUTER_JS,
    "src/views/home/index.vue": HOME_VUE,
    "src/views/home/components/UserCard.vue": USER_CARD_VUE,
    "src/views/user/index.vue": USER_INDEX_VUE,
    "src/views/user/detail.vue": USER_DETAIL_VUE,
    "src/views/orders/list.vue": ORDERS_VUE,
}

